"""Utilities for rendering, linking, and writing the static book site."""

from .link_rewriter import InternalLinkExtension, LinkResolver
from .models import BuildResult, ChildLink, MenuEntry
from .renderer import HtmlContentRenderer, RenderedMarkdown
from .site_builder import SiteBuilder

__all__ = [
    "BuildResult",
    "ChildLink",
    "HtmlContentRenderer",
    "InternalLinkExtension",
    "LinkResolver",
    "MenuEntry",
    "RenderedMarkdown",
    "SiteBuilder",
]
