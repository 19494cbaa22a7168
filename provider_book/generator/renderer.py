"""Utilities for rendering book Markdown and syntax-highlighted code snippets."""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from provider_book.markdown_parser import (
    expand_hints,
    extract_diagrams,
    find_shortcodes,
    replace_references,
    restore_diagrams,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


@dc.dataclass(slots=True)
class RenderedMarkdown:
    """HTML produced for one page body.

    Attributes
    ----------
    html : str
        Converted body HTML.
    toc : list[dict[str, Any]]
        Heading tokens (``level``, ``id``, ``name``, ``children``) for the page
        table of contents.
    has_diagrams : bool
        ``True`` when the body contains at least one Mermaid diagram.
    """

    html: str
    toc: list[dict[str, typ.Any]]
    has_diagrams: bool


class HtmlContentRenderer:
    """Render markdown and code snippets with consistent styling."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with the Pygments style used for highlighting.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(
        self,
        text: str,
        *,
        extensions: cabc.Sequence[Extension] = (),
        resolve_reference: cabc.Callable[[str], str] | None = None,
    ) -> RenderedMarkdown:
        """Render a page body, expanding shortcodes and diagram blocks.

        Parameters
        ----------
        text : str
            Markdown body without its metadata header.
        extensions : Sequence[Extension], optional
            Extra Markdown extensions for this page, such as the link
            rewriter.
        resolve_reference : Callable[[str], str], optional
            Maps ``relref``/``ref`` targets to URLs; shortcodes are left as-is
            when omitted.

        Returns
        -------
        RenderedMarkdown
            Body HTML, table-of-contents tokens, and the diagram flag.
        """
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedMarkdown(html="", toc=[], has_diagrams=False)
        prepared, diagrams = extract_diagrams(normalized)
        prepared = expand_hints(prepared)
        if resolve_reference is not None:
            prepared = replace_references(prepared, resolve_reference)
        for shortcode in find_shortcodes(prepared):
            if not shortcode.closing:
                logger.debug("leaving unknown shortcode %r as written", shortcode.name)

        md = self._build_markdown(extensions)
        html = md.convert(prepared)
        html = self._annotate_codehilite(html, prepared)
        html = restore_diagrams(html, diagrams, self.diagram_block)
        toc = list(getattr(md, "toc_tokens", []))
        return RenderedMarkdown(html=html, toc=toc, has_diagrams=bool(diagrams))

    def markdown(self, text: str) -> str:
        """Render markdown into HTML using the configured extensions."""
        return self.render(text).html

    @staticmethod
    def diagram_block(source: str) -> str:
        """Return the HTML block the Mermaid script renders client-side."""
        return f'<pre class="mermaid">{escape(source)}</pre>'

    def _build_markdown(self, extensions: cabc.Sequence[Extension]) -> Markdown:
        configured: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "md_in_html",
            "toc",
        ]
        configured.extend(extensions)
        return Markdown(
            extensions=configured,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                },
                "toc": {"toc_depth": "2-3"},
            },
            output_format="html",
        )

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["CODE_BLOCK_PATTERN", "HtmlContentRenderer", "RenderedMarkdown"]
