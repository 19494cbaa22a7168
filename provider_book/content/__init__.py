"""Load the Markdown content tree that makes up the book.

This subpackage walks the content directory, validates each file's metadata
header, and returns a :class:`ContentTree` whose nodes mirror the directory
layout in display order. The primary entry point is
:class:`ContentTreeLoader`.

Examples
--------
>>> from pathlib import Path
>>> from provider_book.content import ContentTreeLoader
>>> tree = ContentTreeLoader(Path("content")).load()  # doctest: +SKIP
>>> tree.get("docs/_index.md").page.title  # doctest: +SKIP
'Documentation'
"""

from .errors import (
    ContentConflictError,
    ContentError,
    ContentMetadataError,
    ReferenceWarning,
)
from .frontmatter import FrontMatterError, parse_front_matter
from .loader import ContentTreeLoader, titleize, urlize
from .models import ContentNode, ContentTree, Page, VisibilityFlags

__all__ = [
    "ContentConflictError",
    "ContentError",
    "ContentMetadataError",
    "ContentNode",
    "ContentTree",
    "ContentTreeLoader",
    "FrontMatterError",
    "Page",
    "ReferenceWarning",
    "VisibilityFlags",
    "parse_front_matter",
    "titleize",
    "urlize",
]
