"""High-level orchestration for building the book.

This module ties the pieces together: it loads the content tree, renders each
page body with :class:`HtmlContentRenderer`, resolves internal links, applies
the theme's Jinja templates, and writes a self-contained static site along
with the search index, sitemap, and copied assets. Every build starts from an
empty output directory and is deterministic, so two builds of the same tree
produce identical bytes.

Example
-------
>>> from pathlib import Path
>>> from provider_book.config import load_site_config
>>> from provider_book.generator import SiteBuilder
>>> site = load_site_config(Path("book.yaml"))  # doctest: +SKIP
>>> result = SiteBuilder(site).run()  # doctest: +SKIP
>>> result.pages[0]  # doctest: +SKIP
PosixPath('public/index.html')
"""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from provider_book._constants import (
    NOT_FOUND_FILENAME,
    SEARCH_INDEX_FILENAME,
    SITEMAP_FILENAME,
    SYNTAX_CSS_PATH,
)
from provider_book.config import SiteConfigError
from provider_book.content import ContentConflictError, ContentTreeLoader
from provider_book.generator.link_rewriter import InternalLinkExtension, LinkResolver
from provider_book.generator.minify import minify_css, minify_html
from provider_book.generator.models import BuildResult, ChildLink, MenuEntry
from provider_book.generator.renderer import HtmlContentRenderer
from provider_book.generator.search_index import search_entry, serialize_search_index

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from jinja2 import Template

    from provider_book.config import SiteConfig
    from provider_book.content import ContentNode, ContentTree, Page, ReferenceWarning

logger = logging.getLogger(__name__)

GENERATED_FILES = (
    NOT_FOUND_FILENAME,
    SEARCH_INDEX_FILENAME,
    SITEMAP_FILENAME,
    SYNTAX_CSS_PATH,
)


class SiteBuilder:
    """Render the content tree into a static site directory."""

    def __init__(
        self,
        site: SiteConfig,
        *,
        minify: bool = False,
        include_drafts: bool = False,
    ) -> None:
        """Initialize the builder with configuration and template context.

        Parameters
        ----------
        site : SiteConfig
            Resolved site configuration; ``site.output_dir`` receives the build.
        minify : bool, optional
            Minify HTML, CSS, and the search index.
        include_drafts : bool, optional
            Render pages marked ``draft: true``.
        """
        self.site = site
        self.minify = minify
        self.include_drafts = include_drafts
        self.renderer = HtmlContentRenderer(site.theme.pygments_style)
        search_path = [site.layouts_dir, site.theme.templates_dir]
        self.env = Environment(
            loader=FileSystemLoader([str(path) for path in search_path]),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def run(self) -> BuildResult:
        """Build the whole site.

        Returns
        -------
        BuildResult
            Written files plus every unresolved reference.

        Raises
        ------
        ContentMetadataError
            Raised when a content file has a missing or invalid header.
        ContentConflictError
            Raised when two content files resolve to the same output file, or
            a copied file would overwrite a page or a generated file.
        SiteConfigError
            Raised when the output directory would overlap the sources.
        jinja2.TemplateError
            Raised by the theme templates; surfaced unchanged.
        """
        tree = ContentTreeLoader(
            self.site.content_dir,
            menu_section=self.site.theme.section,
            include_drafts=self.include_drafts,
            root_title=self.site.title,
        ).load()
        static_sources = self._collect_static()
        self._check_copied_outputs(tree, static_sources)
        out_dir = self.site.output_dir
        self._prepare_output_dir(out_dir)

        written: list[Path] = []
        for rel_path, source in sorted(static_sources.items()):
            written.append(self._copy(source, out_dir / rel_path))
        for resource in sorted(tree.resources):
            written.append(
                self._copy(self.site.content_dir / resource, out_dir / resource)
            )

        pages: list[Path] = []
        warnings: list[ReferenceWarning] = []
        search_entries: list[dict[str, str]] = []
        sitemap_urls: list[str] = []
        claimed: set[str] = set()
        static_files = frozenset(static_sources)
        file_backed = {page.output_path for page in tree.pages() if not page.implicit}
        for node, trail in _walk_with_trail(tree.root, ()):
            page = node.page
            if page.output_path in claimed or (
                page.implicit and page.output_path in file_backed
            ):
                continue
            claimed.add(page.output_path)
            resolver = LinkResolver(tree, page, self.site, static_files=static_files)
            html, body_html = self._render_page(tree, node, trail, resolver)
            output_path = out_dir / page.output_path
            self._write(output_path, html)
            pages.append(output_path)
            warnings.extend(resolver.warnings)
            sitemap_urls.append(self.site.permalink(page.url))
            if not page.flags.search_exclude:
                search_entries.append(
                    search_entry(
                        href=self.site.relative_url(page.url),
                        title=page.title,
                        section=trail[1].page.title if len(trail) > 1 else None,
                        html=body_html,
                    )
                )

        written.extend(pages)
        written.append(self._write_syntax_css(out_dir))
        if self.site.theme.search:
            payload = serialize_search_index(search_entries, minify=self.minify)
            written.append(self._write(out_dir / SEARCH_INDEX_FILENAME, payload))
        written.extend(self._write_sitemap(out_dir, sitemap_urls))
        written.extend(self._write_not_found(out_dir, tree))
        logger.info(
            "built %d pages into %s (%d unresolved references)",
            len(pages),
            out_dir,
            len(warnings),
        )
        return BuildResult(
            output_dir=out_dir,
            pages=pages,
            written=sorted(set(written)),
            warnings=warnings,
        )

    def _render_page(
        self,
        tree: ContentTree,
        node: ContentNode,
        trail: tuple[ContentNode, ...],
        resolver: LinkResolver,
    ) -> tuple[str, str]:
        """Return the full page HTML and the rendered body HTML."""
        page = node.page
        rendered = self.renderer.render(
            page.body,
            extensions=[InternalLinkExtension(resolver)],
            resolve_reference=resolver.resolve_reference,
        )
        show_toc = page.flags.toc if page.flags.toc is not None else self.site.theme.toc
        template = self._page_template(page)
        context = {
            "site": self.site,
            "theme": self.site.theme,
            "base_path": self.site.base_path,
            "page": page,
            "permalink": self.site.permalink(page.url),
            "content": rendered.html,
            "toc": rendered.toc if show_toc else [],
            "menu": self._build_menu(tree, page, trail),
            "children": self._child_links(node) if page.is_section else [],
            "edit_url": self._edit_url(page),
            "has_diagrams": rendered.has_diagrams,
        }
        return self._finish(template.render(**context)), rendered.html

    def _page_template(self, page: Page) -> Template:
        """Pick ``<type>.jinja`` for the page, falling back to ``page.jinja``."""
        return self.env.select_template([f"{page.type}.jinja", "page.jinja"])

    def _optional_template(self, name: str) -> Template | None:
        try:
            return self.env.get_template(name)
        except TemplateNotFound:
            logger.debug("theme has no %s template; skipping", name)
            return None

    def _build_menu(
        self, tree: ContentTree, page: Page, trail: tuple[ContentNode, ...]
    ) -> list[MenuEntry]:
        """Build the menu entries for ``page`` from the configured section."""
        section = self.site.theme.section
        menu_root = tree.root if section == "*" else tree.section(section)
        if menu_root is None:
            return []
        active_trail = {ancestor.page.path for ancestor in trail}
        return self._menu_entries(menu_root, page, active_trail)

    def _menu_entries(
        self, node: ContentNode, current: Page, active_trail: set[str]
    ) -> list[MenuEntry]:
        entries: list[MenuEntry] = []
        for child in node.children:
            page = child.page
            if page.flags.hidden:
                continue
            in_trail = page.path in active_trail
            entry = MenuEntry(
                title=page.title,
                href=page.flags.href or self.site.relative_url(page.url),
                active=page.path == current.path,
                is_section=page.is_section,
                collapsible=page.flags.collapse_section,
                flat=page.flags.flat_section,
                external=bool(page.flags.href),
            )
            if page.is_section:
                entry.children = self._menu_entries(child, current, active_trail)
                entry.expanded = not entry.collapsible or in_trail
            entries.append(entry)
        return entries

    def _child_links(self, node: ContentNode) -> list[ChildLink]:
        return [
            ChildLink(
                title=child.page.title,
                href=child.page.flags.href or self.site.relative_url(child.page.url),
                description=child.page.description,
            )
            for child in node.children
            if not child.page.flags.hidden
        ]

    def _edit_url(self, page: Page) -> str | None:
        theme = self.site.theme
        if page.implicit or not (theme.repo_url and theme.edit_path):
            return None
        content_rel = self._content_path_in_repo()
        parts = [theme.repo_url.rstrip("/"), theme.edit_path.strip("/")]
        if content_rel:
            parts.append(content_rel)
        parts.append(page.path)
        return "/".join(parts)

    def _content_path_in_repo(self) -> str:
        """Return the content directory relative to the site root, if inside it."""
        try:
            rel = self.site.content_dir.resolve().relative_to(self.site.root_dir)
        except ValueError:
            return ""
        return "" if rel == Path() else rel.as_posix()

    def _collect_static(self) -> dict[str, Path]:
        """Map output-relative paths to static sources; site files win over theme."""
        sources: dict[str, Path] = {}
        for base in (self.site.theme.static_dir, self.site.static_dir):
            if not base.is_dir():
                continue
            for path in sorted(base.rglob("*")):
                relative = path.relative_to(base)
                if path.is_file() and not any(
                    part.startswith(".") for part in relative.parts
                ):
                    sources[relative.as_posix()] = path
        return sources

    def _check_copied_outputs(
        self, tree: ContentTree, static_sources: dict[str, Path]
    ) -> None:
        """Reject copied files that would be overwritten by rendered output.

        Static files and content resources are copied first; pages, section
        listings, and the generated files are written over them afterwards.
        """
        claimed: dict[str, list[str]] = {
            name: [f"generated {name}"] for name in GENERATED_FILES
        }
        file_backed = {page.output_path for page in tree.pages() if not page.implicit}
        for page in tree.pages():
            if not page.implicit:
                owner = page.path
            elif page.output_path in file_backed:
                continue
            else:
                owner = f"{page.path or '.'} (section listing)"
            claimed.setdefault(page.output_path, []).append(owner)
        for resource in tree.resources:
            claimed.setdefault(resource, []).append(resource)
        for rel_path, source in static_sources.items():
            claimed.setdefault(rel_path, []).append(self._source_label(source))
        for output_path in sorted(claimed):
            owners = claimed[output_path]
            if len(owners) > 1:
                raise ContentConflictError(output_path, owners)

    def _source_label(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.site.root_dir.resolve()).as_posix()
        except ValueError:
            return str(path)

    def _prepare_output_dir(self, out_dir: Path) -> None:
        """Empty ``out_dir``, refusing locations that overlap the sources."""
        resolved = out_dir.resolve()
        protected = [
            self.site.root_dir.resolve(),
            self.site.content_dir.resolve(),
            self.site.static_dir.resolve(),
            self.site.layouts_dir.resolve(),
        ]
        for source in protected:
            if resolved == source or resolved in source.parents:
                msg = f"Refusing to clean output directory '{out_dir}': it contains '{source}'."
                raise SiteConfigError(msg)
        if self.site.content_dir.resolve() in resolved.parents:
            msg = f"Output directory '{out_dir}' must not live inside the content directory."
            raise SiteConfigError(msg)
        if out_dir.exists():
            shutil.rmtree(out_dir)
        out_dir.mkdir(parents=True)

    def _copy(self, source: Path, target: Path) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        if self.minify and target.suffix == ".css":
            target.write_text(
                minify_css(source.read_text(encoding="utf-8")), encoding="utf-8"
            )
        else:
            shutil.copyfile(source, target)
        return target

    def _write(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def _finish(self, html: str) -> str:
        """Apply minification and guarantee a trailing newline."""
        if self.minify:
            return minify_html(html) + "\n"
        return html if html.endswith("\n") else html + "\n"

    def _write_syntax_css(self, out_dir: Path) -> Path:
        css = self.renderer.stylesheet
        if self.minify:
            css = minify_css(css)
        return self._write(out_dir / SYNTAX_CSS_PATH, css + "\n")

    def _write_sitemap(self, out_dir: Path, urls: cabc.Iterable[str]) -> list[Path]:
        template = self._optional_template("sitemap.jinja")
        if template is None:
            return []
        xml = template.render(site=self.site, urls=sorted(urls))
        return [self._write(out_dir / SITEMAP_FILENAME, self._finish(xml))]

    def _write_not_found(self, out_dir: Path, tree: ContentTree) -> list[Path]:
        template = self._optional_template("404.jinja")
        if template is None:
            return []
        html = template.render(
            site=self.site,
            theme=self.site.theme,
            base_path=self.site.base_path,
            menu=self._build_menu(tree, tree.root.page, ()),
        )
        return [self._write(out_dir / NOT_FOUND_FILENAME, self._finish(html))]


def _walk_with_trail(
    node: ContentNode, ancestors: tuple[ContentNode, ...]
) -> cabc.Iterator[tuple[ContentNode, tuple[ContentNode, ...]]]:
    """Yield each node with the chain of nodes from the root down to it."""
    trail = (*ancestors, node)
    yield node, trail
    for child in node.children:
        yield from _walk_with_trail(child, trail)


__all__ = ["SiteBuilder"]
