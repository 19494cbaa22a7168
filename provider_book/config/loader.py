"""Load the site configuration file into typed dataclasses."""

from __future__ import annotations

import tomllib
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .helpers import (
    _build_theme_config,
    _expect_mapping,
    _optional_str,
    _resolve_dir,
)
from .models import SiteConfig, SiteConfigError, normalize_base_url


def _read_raw(path: Path) -> object:
    """Parse ``path`` as TOML or YAML depending on its suffix."""
    if path.suffix.lower() == ".toml":
        try:
            with path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Configuration file '{path}' is not valid TOML: {exc}"
            raise SiteConfigError(msg) from exc

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return loader.load(handle)
    except YAMLError as exc:
        msg = f"Configuration file '{path}' is not valid YAML: {exc}"
        raise SiteConfigError(msg) from exc


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML or TOML file describing the site.

    Parameters
    ----------
    path : Path
        Filesystem path to the configuration file (for example, ``book.yaml``).
        Relative directories inside it resolve against its parent folder.

    Returns
    -------
    SiteConfig
        Parsed configuration with the theme resolved to a directory.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the file cannot be parsed, is not a mapping, lacks ``title`` or
        ``base_url``, or names an unknown theme.

    Examples
    --------
    >>> from pathlib import Path
    >>> from provider_book.config import load_site_config
    >>> config = load_site_config(Path("book.yaml"))  # doctest: +SKIP
    >>> config.theme.name  # doctest: +SKIP
    'book'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loaded = _read_raw(path) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level configuration must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    title = _optional_str(raw.get("title"))
    if not title:
        msg = f"Configuration file '{path}' is missing 'title'."
        raise SiteConfigError(msg)
    base_url = _optional_str(raw.get("base_url"))
    if not base_url:
        msg = f"Configuration file '{path}' is missing 'base_url'."
        raise SiteConfigError(msg)

    root = path.resolve().parent
    themes_dir = _resolve_dir(root, raw.get("themes_dir"), "themes")
    return SiteConfig(
        title=title,
        base_url=normalize_base_url(base_url),
        root_dir=root,
        content_dir=_resolve_dir(root, raw.get("content_dir"), "content"),
        static_dir=_resolve_dir(root, raw.get("static_dir"), "static"),
        layouts_dir=_resolve_dir(root, raw.get("layouts_dir"), "layouts"),
        output_dir=_resolve_dir(root, raw.get("output_dir"), "public"),
        theme=_build_theme_config(raw.get("theme"), themes_dir=themes_dir),
        language_code=_optional_str(raw.get("language_code")) or "en-us",
        params=_expect_mapping(raw.get("params"), field="params"),
        config_path=path.resolve(),
    )


__all__ = ["load_site_config"]
