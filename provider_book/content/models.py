"""Typed dataclasses describing the loaded content tree."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import posixpath
import typing as typ


@dc.dataclass(slots=True)
class VisibilityFlags:
    """Display switches read from the ``book*`` header fields.

    Attributes
    ----------
    toc : bool or None
        ``bookToc``; ``None`` defers to the theme default.
    hidden : bool
        ``bookHidden``; the page is rendered but left out of the menu.
    collapse_section : bool
        ``bookCollapseSection``; the section's menu entries start collapsed.
    flat_section : bool
        ``bookFlatSection``; the section's children are listed inline.
    search_exclude : bool
        ``bookSearchExclude``; the page is left out of the search index.
    href : str or None
        ``bookHref``; the menu entry links to this URL instead of the page.
    """

    toc: bool | None = None
    hidden: bool = False
    collapse_section: bool = False
    flat_section: bool = False
    search_exclude: bool = False
    href: str | None = None


@dc.dataclass(slots=True)
class Page:
    """A single content unit: one Markdown file or one implicit section."""

    path: str
    title: str
    weight: int | None
    type: str
    body: str
    url: str
    output_path: str
    is_section: bool = False
    implicit: bool = False
    draft: bool = False
    description: str | None = None
    slug: str | None = None
    flags: VisibilityFlags = dc.field(default_factory=VisibilityFlags)
    params: dict[str, typ.Any] = dc.field(default_factory=dict)

    @property
    def directory(self) -> str:
        """Content-relative directory used to resolve relative references."""
        if self.implicit:
            return self.path.rstrip("/")
        return posixpath.dirname(self.path)

    @property
    def sort_key(self) -> tuple[bool, int, str, str]:
        """Sibling ordering: weight, then title, then path."""
        return (
            self.weight is None,
            self.weight or 0,
            self.title.casefold(),
            self.path,
        )


@dc.dataclass(slots=True)
class ContentNode:
    """A page plus its ordered child nodes."""

    page: Page
    children: list[ContentNode] = dc.field(default_factory=list)

    def walk(self) -> cabc.Iterator[ContentNode]:
        """Yield this node and every descendant in display order."""
        yield self
        for child in self.children:
            yield from child.walk()


class ContentTree:
    """Ordered page hierarchy with path and URL lookups."""

    __slots__ = ("_by_path", "_by_url", "resources", "root")

    def __init__(self, root: ContentNode, resources: cabc.Iterable[str] = ()) -> None:
        self.root = root
        self.resources = frozenset(resources)
        self._by_path: dict[str, ContentNode] = {}
        self._by_url: dict[str, ContentNode] = {}
        for node in root.walk():
            self._by_path[node.page.path] = node
            self._by_url.setdefault(node.page.url, node)

    def __len__(self) -> int:
        return len(self._by_path)

    def walk(self) -> cabc.Iterator[ContentNode]:
        """Yield every node depth-first in display order."""
        return self.root.walk()

    def pages(self) -> list[Page]:
        """Return every page in display order."""
        return [node.page for node in self.walk()]

    def get(self, path: str) -> ContentNode | None:
        """Return the node loaded from ``path``, if any."""
        return self._by_path.get(path)

    def find_by_url(self, url: str) -> ContentNode | None:
        """Return the node served at ``url`` (leading/trailing slashes optional)."""
        stripped = url.strip("/").lower()
        normalized = f"/{stripped}/" if stripped else "/"
        return self._by_url.get(normalized)

    def section(self, path: str) -> ContentNode | None:
        """Return the section node for a content-relative directory."""
        directory = path.strip("/")
        if not directory:
            return self.root
        for candidate in (
            f"{directory}/_index.md",
            f"{directory}/index.md",
            f"{directory}/",
        ):
            node = self._by_path.get(candidate)
            if node is not None and node.page.is_section:
                return node
        return None

    def resolve(self, target: str, *, source: Page) -> Page | None:
        """Resolve a reference written in ``source`` to the page it names.

        Parameters
        ----------
        target : str
            Reference without fragment or query, e.g. ``../guide.md``,
            ``/docs/guide`` or ``docs/guide/``.
        source : Page
            Page containing the reference; relative targets are resolved
            against its directory first and against the content root second.

        Returns
        -------
        Page or None
            The referenced page, or ``None`` when nothing matches.
        """
        if not target:
            return None
        if target.startswith("/"):
            bases = [""]
        else:
            bases = [source.directory, ""]
        for base in bases:
            joined = posixpath.normpath(posixpath.join(base, target.lstrip("/")))
            if joined.startswith(".."):
                continue
            node = self._match(joined if joined != "." else "")
            if node is not None:
                return node.page
        return None

    def resolve_resource(self, target: str, *, source: Page) -> str | None:
        """Return the content-relative path of a non-page resource, if present."""
        bases = [""] if target.startswith("/") else [source.directory, ""]
        for base in bases:
            joined = posixpath.normpath(posixpath.join(base, target.lstrip("/")))
            if joined in self.resources:
                return joined
        return None

    def _match(self, candidate: str) -> ContentNode | None:
        stripped = candidate.strip("/")
        if not stripped:
            return self.root
        for key in (
            stripped,
            f"{stripped}.md",
            f"{stripped}.markdown",
            f"{stripped}/_index.md",
            f"{stripped}/index.md",
            f"{stripped}/",
        ):
            node = self._by_path.get(key)
            if node is not None:
                return node
        return self.find_by_url(stripped)


__all__ = ["ContentNode", "ContentTree", "Page", "VisibilityFlags"]
