"""Walk the content directory and build the ordered page tree.

The loader is the only component with real logic in the book build: it reads
every Markdown file, validates its metadata header, resolves the output
location each page will be written to, and arranges pages into sections that
mirror the directory layout. It performs no writes.

Example
-------
>>> from pathlib import Path
>>> from provider_book.content import ContentTreeLoader
>>> tree = ContentTreeLoader(Path("content")).load()  # doctest: +SKIP
>>> [node.page.title for node in tree.root.children]  # doctest: +SKIP
['Documentation']
"""

from __future__ import annotations

import logging
import posixpath
import re
import typing as typ
from pathlib import Path

from provider_book._constants import (
    DEFAULT_MENU_SECTION,
    MARKDOWN_SUFFIXES,
    PAGE_OUTPUT_FILENAME,
    SECTION_INDEX_NAMES,
)

from .errors import ContentConflictError, ContentMetadataError
from .frontmatter import FrontMatterError, parse_front_matter
from .models import ContentNode, ContentTree, Page, VisibilityFlags

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")
RECOGNISED_FIELDS = {
    "title": "title",
    "type": "type",
    "weight": "weight",
    "draft": "draft",
    "description": "description",
    "slug": "slug",
    "booktoc": "bookToc",
    "bookhidden": "bookHidden",
    "bookcollapsesection": "bookCollapseSection",
    "bookflatsection": "bookFlatSection",
    "booksearchexclude": "bookSearchExclude",
    "bookhref": "bookHref",
}


def urlize(segment: str) -> str:
    """Lower-case a path segment and replace whitespace runs with hyphens."""
    return WHITESPACE_PATTERN.sub("-", segment.strip()).lower()


def titleize(name: str) -> str:
    """Turn a directory name such as ``getting-started`` into a title."""
    words = re.split(r"[-_\s]+", name.strip())
    return " ".join(word[:1].upper() + word[1:] for word in words if word) or name


def _is_ignored(relative: Path) -> bool:
    return any(part.startswith(".") or part.endswith("~") for part in relative.parts)


class ContentTreeLoader:
    """Load Markdown files under ``root`` into a :class:`ContentTree`."""

    def __init__(
        self,
        root: Path,
        *,
        menu_section: str = DEFAULT_MENU_SECTION,
        include_drafts: bool = False,
        root_title: str = "Home",
    ) -> None:
        """Configure the loader.

        Parameters
        ----------
        root : Path
            Content directory to walk.
        menu_section : str, optional
            Top-level directory whose pages default to the ``docs`` type;
            ``"*"`` applies the ``docs`` type everywhere.
        include_drafts : bool, optional
            Keep pages marked ``draft: true``. Drafts are always validated.
        root_title : str, optional
            Title for the home page when the root has no index file.
        """
        self.root = root
        self.menu_section = menu_section
        self.include_drafts = include_drafts
        self.root_title = root_title

    def load(self) -> ContentTree:
        """Read, validate, and arrange every content file.

        Returns
        -------
        ContentTree
            Ordered hierarchy of pages plus the set of resource files.

        Raises
        ------
        FileNotFoundError
            If the content directory does not exist.
        ContentMetadataError
            If a file's header is missing, unparsable, or has invalid fields.
        ContentConflictError
            If two files resolve to the same output location.
        """
        if not self.root.is_dir():
            msg = f"Content directory '{self.root}' not found."
            raise FileNotFoundError(msg)

        pages: list[Page] = []
        resources: list[str] = []
        for file_path in sorted(self.root.rglob("*")):
            relative = file_path.relative_to(self.root)
            if not file_path.is_file() or _is_ignored(relative):
                continue
            rel_posix = relative.as_posix()
            if file_path.suffix.lower() in MARKDOWN_SUFFIXES:
                page = self._load_page(file_path, rel_posix)
                if page.draft and not self.include_drafts:
                    logger.debug("skipping draft %s", rel_posix)
                    continue
                pages.append(page)
            else:
                resources.append(rel_posix)

        _check_conflicts(pages, resources)
        root = self._build_tree(pages)
        logger.debug("loaded %d pages and %d resources", len(pages), len(resources))
        return ContentTree(root, resources)

    def _load_page(self, file_path: Path, rel_path: str) -> Page:
        """Parse one Markdown file into a :class:`Page`."""
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ContentMetadataError(rel_path, "file is not valid UTF-8") from exc
        try:
            raw_meta, body = parse_front_matter(text)
        except FrontMatterError as exc:
            raise ContentMetadataError(rel_path, str(exc)) from exc

        meta, params = _normalize_fields(rel_path, raw_meta)
        title = _require_title(rel_path, meta.get("title"))
        slug = _require_slug(rel_path, meta.get("slug"))
        directory = posixpath.dirname(rel_path)
        is_section = posixpath.basename(rel_path) in SECTION_INDEX_NAMES
        url = _page_url(directory, None if is_section else _page_name(rel_path, slug))
        output_path = _output_path(url)
        if output_path.startswith("../"):
            msg = f"output path '{output_path}' leaves the output directory"
            raise ContentMetadataError(rel_path, msg)
        return Page(
            path=rel_path,
            title=title,
            weight=_optional_int(rel_path, "weight", meta.get("weight")),
            type=_optional_str(rel_path, "type", meta.get("type"))
            or self._default_type(directory),
            body=body,
            url=url,
            output_path=output_path,
            is_section=is_section,
            draft=bool(_optional_bool(rel_path, "draft", meta.get("draft"))),
            description=_optional_str(rel_path, "description", meta.get("description")),
            slug=slug,
            flags=VisibilityFlags(
                toc=_optional_bool(rel_path, "bookToc", meta.get("booktoc")),
                hidden=bool(_optional_bool(rel_path, "bookHidden", meta.get("bookhidden"))),
                collapse_section=bool(
                    _optional_bool(
                        rel_path, "bookCollapseSection", meta.get("bookcollapsesection")
                    )
                ),
                flat_section=bool(
                    _optional_bool(rel_path, "bookFlatSection", meta.get("bookflatsection"))
                ),
                search_exclude=bool(
                    _optional_bool(
                        rel_path, "bookSearchExclude", meta.get("booksearchexclude")
                    )
                ),
                href=_optional_str(rel_path, "bookHref", meta.get("bookhref")),
            ),
            params=params,
        )

    def _default_type(self, directory: str) -> str:
        if self.menu_section == "*":
            return "docs"
        top = directory.split("/", 1)[0]
        return "docs" if top and top == self.menu_section else "page"

    def _implicit_section(self, directory: str) -> Page:
        """Synthesize the page for a directory without an index file."""
        url = _page_url(directory, None)
        title = titleize(posixpath.basename(directory)) if directory else self.root_title
        return Page(
            path=f"{directory}/" if directory else "",
            title=title,
            weight=None,
            type=self._default_type(directory),
            body="",
            url=url,
            output_path=_output_path(url),
            is_section=True,
            implicit=True,
        )

    def _build_tree(self, pages: list[Page]) -> ContentNode:
        """Arrange pages into section nodes and sort every level."""
        sections: dict[str, ContentNode] = {}
        for page in pages:
            if page.is_section:
                directory = posixpath.dirname(page.path)
                # Competing index files were already rejected by _check_conflicts.
                sections[directory] = ContentNode(page)

        def ensure_section(directory: str) -> ContentNode:
            node = sections.get(directory)
            if node is None:
                node = ContentNode(self._implicit_section(directory))
                sections[directory] = node
            if directory:
                parent = ensure_section(posixpath.dirname(directory))
                if all(child is not node for child in parent.children):
                    parent.children.append(node)
            return node

        root = ensure_section("")
        for page in pages:
            if page.is_section:
                ensure_section(posixpath.dirname(page.path))
            else:
                ensure_section(posixpath.dirname(page.path)).children.append(
                    ContentNode(page)
                )
        _sort_children(root)
        return root


def _sort_children(node: ContentNode) -> None:
    node.children.sort(key=lambda child: child.page.sort_key)
    for child in node.children:
        _sort_children(child)


def _check_conflicts(pages: list[Page], resources: list[str]) -> None:
    """Raise :class:`ContentConflictError` for the first shared output path.

    Resources are copied verbatim, so a resource at ``docs/guide/index.html``
    competes with the page rendered for ``docs/guide.md``.
    """
    claimed: dict[str, list[str]] = {}
    for page in pages:
        claimed.setdefault(page.output_path, []).append(page.path)
    for resource in resources:
        claimed.setdefault(resource, []).append(resource)
    for output_path in sorted(claimed):
        owners = claimed[output_path]
        if len(owners) > 1:
            raise ContentConflictError(output_path, owners)


def _page_name(rel_path: str, slug: str | None) -> str:
    if slug:
        return slug
    return posixpath.splitext(posixpath.basename(rel_path))[0]


def _page_url(directory: str, name: str | None) -> str:
    """Return the pretty URL for a page in ``directory`` (``None`` for index pages)."""
    segments = [urlize(part) for part in directory.split("/") if part]
    if name is not None:
        segments.append(urlize(name))
    if not segments:
        return "/"
    return "/" + "/".join(segments) + "/"


def _output_path(url: str) -> str:
    return posixpath.normpath(url.lstrip("/") + PAGE_OUTPUT_FILENAME)


def _normalize_fields(
    rel_path: str, raw: dict[str, typ.Any]
) -> tuple[dict[str, typ.Any], dict[str, typ.Any]]:
    """Split header keys into recognised (lower-cased) fields and free params."""
    meta: dict[str, typ.Any] = {}
    params: dict[str, typ.Any] = {}
    seen: dict[str, str] = {}
    for key, value in raw.items():
        text_key = str(key)
        lowered = text_key.lower()
        if lowered in seen:
            msg = f"duplicate field '{text_key}' (already set as '{seen[lowered]}')"
            raise ContentMetadataError(rel_path, msg)
        seen[lowered] = text_key
        if lowered in RECOGNISED_FIELDS:
            meta[lowered] = value
        else:
            params[text_key] = value
    return meta, params


def _require_title(rel_path: str, value: object) -> str:
    if value is None:
        raise ContentMetadataError(rel_path, "missing required field 'title'")
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        msg = f"field 'title' must be a string, got {type(value).__name__}"
        raise ContentMetadataError(rel_path, msg)
    title = str(value).strip()
    if not title:
        raise ContentMetadataError(rel_path, "field 'title' must not be empty")
    return title


def _optional_int(rel_path: str, field: str, value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"field '{field}' must be an integer, got {value!r}"
        raise ContentMetadataError(rel_path, msg)
    return value


def _optional_bool(rel_path: str, field: str, value: object) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"field '{field}' must be true or false, got {value!r}"
        raise ContentMetadataError(rel_path, msg)
    return value


def _optional_str(rel_path: str, field: str, value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"field '{field}' must be a string, got {value!r}"
        raise ContentMetadataError(rel_path, msg)
    return value.strip() or None


def _require_slug(rel_path: str, value: object) -> str | None:
    slug = _optional_str(rel_path, "slug", value)
    if slug is None:
        return None
    if slug in {".", ".."} or "/" in slug or "\\" in slug:
        msg = f"field 'slug' must be a single path segment, got {slug!r}"
        raise ContentMetadataError(rel_path, msg)
    return slug


__all__ = ["ContentTreeLoader", "titleize", "urlize"]
