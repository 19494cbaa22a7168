"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from provider_book._constants import DEFAULT_MENU_SECTION, DEFAULT_THEME

from .models import DEFAULT_MERMAID_URL, SiteConfigError, ThemeConfig

BUILTIN_THEMES_DIR = Path(__file__).resolve().parents[1] / "themes"


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _expect_bool(value: object, *, field: str, default: bool) -> bool:
    """Return ``value`` when it is a boolean, ``default`` when unset."""
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"'{field}' must be true or false, got {value!r}."
        raise SiteConfigError(msg)
    return value


def _expect_mapping(value: object, *, field: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating ``None`` as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{field}' must be a mapping."
        raise SiteConfigError(msg)
    return dict(value)


def _resolve_dir(root: Path, value: object | None, default: str) -> Path:
    """Resolve a configured directory relative to the config file's folder."""
    text = _optional_str(value) or default
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _available_themes(themes_dir: Path) -> list[str]:
    names = {
        entry.name
        for base in (themes_dir, BUILTIN_THEMES_DIR)
        if base.is_dir()
        for entry in base.iterdir()
        if (entry / "templates").is_dir()
    }
    return sorted(names)


def _resolve_theme_path(name: str, themes_dir: Path) -> Path:
    """Return the directory for theme ``name``; site themes shadow built-ins."""
    for base in (themes_dir, BUILTIN_THEMES_DIR):
        candidate = base / name
        if (candidate / "templates").is_dir():
            return candidate
    available = ", ".join(_available_themes(themes_dir)) or "none"
    msg = f"Unknown theme '{name}'. Available themes: {available}"
    raise SiteConfigError(msg)


def _build_theme_config(payload: object, *, themes_dir: Path) -> ThemeConfig:
    """Build a ThemeConfig from a theme name or a mapping of theme options."""
    if isinstance(payload, str):
        payload = {"name": payload}
    options = _expect_mapping(payload, field="theme")
    base = ThemeConfig()
    name = _optional_str(options.get("name")) or DEFAULT_THEME
    return ThemeConfig(
        name=name,
        path=_resolve_theme_path(name, themes_dir),
        pygments_style=_optional_str(options.get("pygments_style"))
        or base.pygments_style,
        toc=_expect_bool(options.get("toc"), field="theme.toc", default=base.toc),
        section=_optional_str(options.get("section")) or DEFAULT_MENU_SECTION,
        search=_expect_bool(
            options.get("search"), field="theme.search", default=base.search
        ),
        repo_url=_optional_str(options.get("repo_url")),
        edit_path=_optional_str(options.get("edit_path")),
        mermaid_url=_optional_str(options.get("mermaid_url")) or DEFAULT_MERMAID_URL,
    )


__all__ = [
    "BUILTIN_THEMES_DIR",
    "_build_theme_config",
    "_expect_bool",
    "_expect_mapping",
    "_optional_str",
    "_resolve_dir",
    "_resolve_theme_path",
]
