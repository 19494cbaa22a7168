"""Tests for Markdown rendering and shortcode pre-processing.

These tests feed page bodies through ``HtmlContentRenderer`` and inspect the
HTML with BeautifulSoup: highlighted code keeps its ``data-language`` label,
Mermaid diagrams become ``<pre class="mermaid">`` blocks, hint shortcodes wrap
rendered Markdown, and ``relref`` shortcodes are resolved through a callback.
"""

from __future__ import annotations

import logging

import pytest
from bs4 import BeautifulSoup

from provider_book.generator import HtmlContentRenderer
from provider_book.markdown_parser import find_shortcodes, shortcode_args


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_code_blocks_are_highlighted_with_language() -> None:
    """Fenced code renders through codehilite with a language annotation."""
    rendered = HtmlContentRenderer().render("```hcl\nresource \"x\" \"y\" {}\n```\n")

    block = _soup(rendered.html).find("div", class_="codehilite")
    assert block is not None, "expected a codehilite block"
    assert block.get("data-language") == "hcl"


def test_indented_fences_with_extra_labels_render() -> None:
    """Fences indented inside lists and labels like ``rust,no_run`` still render."""
    text = "- Example\n\n  ```rust,no_run\n  fn main() {}\n  ```\n"

    rendered = HtmlContentRenderer().render(text)

    soup = _soup(rendered.html)
    blocks = soup.select(".codehilite")
    assert blocks, "expected a highlighted block"
    assert blocks[0].get("data-language") == "rust"
    assert "fn main" in blocks[0].get_text()


def test_toc_collects_second_and_third_level_headings() -> None:
    """The table of contents covers ``##`` and ``###`` headings."""
    rendered = HtmlContentRenderer().render(
        "# Title\n\n## Install\n\n### From source\n\n#### Deep\n"
    )

    assert [token["name"] for token in rendered.toc] == ["Install"]
    assert [child["name"] for child in rendered.toc[0]["children"]] == ["From source"]


def test_mermaid_fence_becomes_diagram_block() -> None:
    """Mermaid fences are emitted verbatim for client-side rendering."""
    rendered = HtmlContentRenderer().render(
        "Intro\n\n```mermaid\ngraph TD\n  A-->B\n```\n\nOutro\n"
    )

    pre = _soup(rendered.html).find("pre", class_="mermaid")
    assert pre is not None
    assert pre.get_text() == "graph TD\n  A-->B"
    assert rendered.has_diagrams
    assert "codehilite" not in rendered.html


def test_mermaid_shortcode_becomes_diagram_block() -> None:
    """The ``mermaid`` shortcode is an alternative to fences."""
    rendered = HtmlContentRenderer().render(
        "{{< mermaid >}}\nsequenceDiagram\n  A->>B: hi\n{{< /mermaid >}}\n"
    )

    pre = _soup(rendered.html).find("pre", class_="mermaid")
    assert pre is not None
    assert "sequenceDiagram" in pre.get_text()


def test_hint_shortcode_wraps_rendered_markdown() -> None:
    """Hint bodies are still parsed as Markdown."""
    rendered = HtmlContentRenderer().render(
        "{{< hint warning >}}\nUse **caution** here.\n{{< /hint >}}\n"
    )

    hint = _soup(rendered.html).find("div", class_="book-hint")
    assert hint is not None
    assert hint.get("class") == ["book-hint", "warning"]
    strong = hint.find("strong")
    assert strong is not None
    assert strong.get_text() == "caution"


def test_relref_shortcodes_use_resolver() -> None:
    """``relref`` targets are replaced with whatever the resolver returns."""
    seen: list[str] = []

    def resolve(target: str) -> str:
        seen.append(target)
        return "/docs/guide/"

    rendered = HtmlContentRenderer().render(
        'See [the guide]({{< relref "guide.md" >}}).\n', resolve_reference=resolve
    )

    link = _soup(rendered.html).find("a")
    assert link is not None
    assert link.get("href") == "/docs/guide/"
    assert seen == ["guide.md"]


def test_unknown_shortcodes_are_left_in_place() -> None:
    """Shortcodes without a handler pass through untouched."""
    rendered = HtmlContentRenderer().render("{{< tabs \"One\" >}}\n")

    assert "{{&lt; tabs" in rendered.html or "{{< tabs" in rendered.html


def test_empty_body_renders_nothing() -> None:
    """Whitespace-only bodies produce no HTML."""
    rendered = HtmlContentRenderer().render("\n\n")

    assert rendered.html == ""
    assert rendered.toc == []
    assert not rendered.has_diagrams


def test_shortcode_helpers_split_arguments() -> None:
    """Arguments honour quotes and closing tags are flagged."""
    assert shortcode_args('"a b" c \'d\'') == ["a b", "c", "d"]
    codes = find_shortcodes('{{< tabs "One" >}}x{{< /tabs >}}')
    assert [(code.name, code.closing, code.args) for code in codes] == [
        ("tabs", False, ["One"]),
        ("tabs", True, []),
    ]


def test_stylesheet_targets_codehilite() -> None:
    """The generated stylesheet scopes rules to ``.codehilite``."""
    assert ".codehilite" in HtmlContentRenderer("friendly").stylesheet


def test_unknown_shortcodes_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Unhandled shortcodes are reported at debug level."""
    with caplog.at_level(logging.DEBUG, logger="provider_book.generator.renderer"):
        HtmlContentRenderer().render("{{< tabs >}}\nx\n{{< /tabs >}}\n")

    assert "leaving unknown shortcode 'tabs' as written" in caplog.text
