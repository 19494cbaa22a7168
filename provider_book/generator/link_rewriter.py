"""Resolve internal Markdown links against the content tree.

Authors link between pages the way they would on GitHub (``../guide.md``) or
with theme shortcodes (``{{< relref "/docs/guide" >}}``). Both forms are
rewritten to the target page's site URL. Links that cannot be resolved are
reported as :class:`~provider_book.content.ReferenceWarning` and left as
written, since some referenced pages are still being drafted.
"""

from __future__ import annotations

import logging
import posixpath
import typing as typ
from urllib.parse import quote, unquote, urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from provider_book._constants import MARKDOWN_SUFFIXES
from provider_book.content import ReferenceWarning

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from provider_book.config import SiteConfig
    from provider_book.content import ContentTree, Page
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

logger = logging.getLogger(__name__)

EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "data:", "javascript:")


class LinkResolver:
    """Map link targets written in one page to site URLs.

    The resolver records every target it cannot resolve; callers read
    :attr:`warnings` after rendering the page.
    """

    def __init__(
        self,
        tree: ContentTree,
        page: Page,
        site: SiteConfig,
        *,
        static_files: frozenset[str] = frozenset(),
    ) -> None:
        self.tree = tree
        self.page = page
        self.site = site
        self.static_files = static_files
        self.warnings: list[ReferenceWarning] = []

    def resolve_reference(self, target: str) -> str:
        """Resolve a ``relref``/``ref`` shortcode target to a URL."""
        rewritten = self.rewrite(target, require_page=True)
        return target if rewritten is None else rewritten

    def rewrite(self, target: str | None, *, require_page: bool = False) -> str | None:
        """Return the rewritten URL for ``target`` or ``None`` to leave it alone.

        Parameters
        ----------
        target : str or None
            ``href`` or ``src`` value as written by the author.
        require_page : bool, optional
            Treat every target as a page reference (used for shortcodes).

        Returns
        -------
        str or None
            Site-relative URL including any query and fragment, or ``None``
            for external links, pure fragments, and unresolved targets.
        """
        if not target or _is_external(target):
            return None
        parsed = urlsplit(target)
        if not parsed.path:
            return None
        path = unquote(parsed.path)
        base_path = self.site.base_path
        if base_path != "/" and path.startswith(base_path):
            path = "/" + path[len(base_path) :]

        url: str | None
        if require_page or _looks_like_page(path):
            found = self.tree.resolve(path, source=self.page)
            url = None if found is None else self.site.relative_url(found.url)
        else:
            url = self._resolve_file(path)

        if url is None:
            self._warn(target)
            return None
        if parsed.query:
            url = f"{url}?{parsed.query}"
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url

    def _resolve_file(self, path: str) -> str | None:
        resource = self.tree.resolve_resource(path, source=self.page)
        if resource is not None:
            return self.site.relative_url(quote(resource))
        static_path = posixpath.normpath(path.lstrip("/"))
        if static_path in self.static_files:
            return self.site.relative_url(quote(static_path))
        return None

    def _warn(self, target: str) -> None:
        warning = ReferenceWarning(self.page.path, target)
        if warning not in self.warnings:
            self.warnings.append(warning)
            logger.warning("%s", warning)


def _is_external(target: str) -> bool:
    lower = target.lower()
    if lower.startswith(EXTERNAL_PREFIXES) or target.startswith("//"):
        return True
    parsed = urlsplit(target)
    return bool(parsed.scheme or parsed.netloc)


def _looks_like_page(path: str) -> bool:
    if path.endswith("/"):
        return True
    _, ext = posixpath.splitext(posixpath.basename(path))
    return not ext or ext.lower() in MARKDOWN_SUFFIXES


class InternalLinkExtension(Extension):
    """Rewrite internal links in one page through a :class:`LinkResolver`.

    Insert this extension into a ``markdown.Markdown`` instance to point
    ``<a href>`` and ``<img src>`` values at the rendered site instead of the
    Markdown sources they name.
    """

    def __init__(self, resolver: LinkResolver) -> None:
        super().__init__()
        self.resolver = resolver

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the internal-link treeprocessor on the Markdown instance."""
        processor = InternalLinkTreeprocessor(md, self.resolver)
        md.treeprocessors.register(processor, "book_internal_links", 15)


class InternalLinkTreeprocessor(Treeprocessor):
    """Rewrite anchors and images that point at other content."""

    ATTRIBUTES: typ.ClassVar[dict[str, str]] = {"a": "href", "img": "src"}

    def __init__(self, md: Markdown, resolver: LinkResolver) -> None:
        super().__init__(md)
        self.resolver = resolver

    def run(self, root: Element) -> Element:
        """Rewrite internal references in the parsed markdown tree."""
        for element in root.iter():
            attribute = self.ATTRIBUTES.get(element.tag)
            if attribute is None:
                continue
            rewritten = self.resolver.rewrite(element.get(attribute))
            if rewritten:
                element.set(attribute, rewritten)
        return root


__all__ = [
    "InternalLinkExtension",
    "InternalLinkTreeprocessor",
    "LinkResolver",
]
