"""Typed dataclasses describing the book's site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from provider_book._constants import DEFAULT_MENU_SECTION, DEFAULT_THEME

DEFAULT_MERMAID_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Theme selection plus the options the book theme understands."""

    name: str = DEFAULT_THEME
    path: Path = Path()
    pygments_style: str = "monokai"
    toc: bool = True
    section: str = DEFAULT_MENU_SECTION
    search: bool = True
    repo_url: str | None = None
    edit_path: str | None = None
    mermaid_url: str = DEFAULT_MERMAID_URL

    @property
    def templates_dir(self) -> Path:
        """Directory holding the theme's Jinja templates."""
        return self.path / "templates"

    @property
    def static_dir(self) -> Path:
        """Directory holding the theme's CSS and JS assets."""
        return self.path / "static"


@dc.dataclass(slots=True)
class SiteConfig:
    """Process-wide settings loaded once at the start of a build."""

    title: str
    base_url: str
    root_dir: Path
    content_dir: Path
    static_dir: Path
    layouts_dir: Path
    output_dir: Path
    theme: ThemeConfig
    language_code: str = "en-us"
    params: dict[str, typ.Any] = dc.field(default_factory=dict)
    config_path: Path | None = None

    @property
    def base_path(self) -> str:
        """Path component of ``base_url``, always wrapped in slashes."""
        path = urlsplit(self.base_url).path.strip("/")
        return f"/{path}/" if path else "/"

    def permalink(self, url: str) -> str:
        """Return the absolute URL for a site-relative ``url``."""
        return self.base_url + url.lstrip("/")

    def relative_url(self, url: str) -> str:
        """Return ``url`` prefixed with the base path (no scheme or host)."""
        return self.base_path + url.lstrip("/")

    def with_base_url(self, base_url: str) -> SiteConfig:
        """Return a copy of this configuration served from ``base_url``."""
        return dc.replace(self, base_url=normalize_base_url(base_url))

    def with_output_dir(self, output_dir: Path) -> SiteConfig:
        """Return a copy of this configuration writing into ``output_dir``."""
        return dc.replace(self, output_dir=output_dir)


def normalize_base_url(value: str) -> str:
    """Validate ``value`` as an absolute URL and ensure a trailing slash."""
    text = value.strip()
    parts = urlsplit(text)
    if not parts.scheme or not parts.netloc:
        msg = f"base_url '{value}' must be an absolute URL such as https://example.org/"
        raise SiteConfigError(msg)
    return text if text.endswith("/") else f"{text}/"


__all__ = [
    "DEFAULT_MERMAID_URL",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "normalize_base_url",
]
