"""Load and validate the book's site configuration.

This subpackage parses ``book.yaml`` (or a TOML equivalent), resolves content,
static, layout, and output directories relative to the file, selects a theme,
and returns a :class:`SiteConfig` that the rest of the build treats as
read-only. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from provider_book.config import load_site_config
>>> site = load_site_config(Path("book.yaml"))  # doctest: +SKIP
>>> site.base_url  # doctest: +SKIP
'https://example.org/terraform-provider-book/'
"""

from .loader import load_site_config
from .models import SiteConfig, SiteConfigError, ThemeConfig, normalize_base_url

__all__ = [
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "load_site_config",
    "normalize_base_url",
]
