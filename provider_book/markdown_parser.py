r"""Pre-process book Markdown before it reaches Python Markdown.

Content pages use a handful of theme shortcodes (``hint``, ``mermaid``,
``relref``/``ref``) and fenced ``mermaid`` diagrams. Python Markdown knows
nothing about them, so this module rewrites them into plain Markdown plus raw
HTML placeholders that the renderer swaps back in after conversion.

Example
-------
>>> from provider_book.markdown_parser import extract_diagrams
>>> text, diagrams = extract_diagrams("```mermaid\ngraph TD; A-->B\n```\n")
>>> diagrams
['graph TD; A-->B']
>>> 'data-diagram-slot="0"' in text
True
"""

from __future__ import annotations

import dataclasses as dc
import re
import textwrap
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

SHORTCODE_PATTERN = re.compile(
    r"\{\{(?P<delim>[<%])\s*(?P<closing>/)?\s*(?P<name>[A-Za-z][\w-]*)"
    r"(?P<args>(?:\s+[^>%}]*?)?)\s*[>%]\}\}"
)
MERMAID_FENCE_PATTERN = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ \t]*mermaid[ \t]*\r?\n(?P<body>.*?)^(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
MERMAID_SHORTCODE_PATTERN = re.compile(
    r"\{\{[<%]\s*mermaid\b[^}]*?[>%]\}\}(?P<body>.*?)\{\{[<%]\s*/\s*mermaid\s*[>%]\}\}",
    re.DOTALL,
)
HINT_OPEN_PATTERN = re.compile(r"\{\{[<%]\s*hint\b(?P<args>[^}]*?)[>%]\}\}")
HINT_CLOSE_PATTERN = re.compile(r"\{\{[<%]\s*/\s*hint\s*[>%]\}\}")
REF_SHORTCODE_PATTERN = re.compile(
    r"\{\{[<%]\s*(?P<kind>relref|ref)\s+(?P<args>[^}]*?)\s*[>%]\}\}"
)
ARGUMENT_PATTERN = re.compile(r'"([^"]*)"|\'([^\']*)\'|(\S+)')
DIAGRAM_PLACEHOLDER = '<div class="book-diagram" data-diagram-slot="{index}"></div>'
DIAGRAM_SLOT_PATTERN = re.compile(
    r'(?:<p>)?<div class="book-diagram" data-diagram-slot="(\d+)"></div>(?:</p>)?'
)
HINT_KINDS = frozenset({"info", "warning", "danger"})


@dc.dataclass(slots=True)
class Shortcode:
    """A shortcode occurrence left in the Markdown after pre-processing.

    Attributes
    ----------
    name : str
        Shortcode name, e.g. ``tabs``.
    closing : bool
        ``True`` for ``{{< /name >}}`` tags.
    args : list[str]
        Positional arguments with quotes removed.
    """

    name: str
    closing: bool
    args: list[str]


def shortcode_args(raw: str) -> list[str]:
    """Split shortcode arguments, honouring single and double quotes."""
    return [
        next(group for group in match.groups() if group is not None)
        for match in ARGUMENT_PATTERN.finditer(raw)
    ]


def extract_diagrams(text: str) -> tuple[str, list[str]]:
    """Replace Mermaid fences and shortcodes with numbered placeholders.

    Parameters
    ----------
    text : str
        Markdown whose fenced blocks already start at column zero.

    Returns
    -------
    tuple[str, list[str]]
        Markdown with each diagram swapped for a raw HTML placeholder block,
        and the diagram sources in document order.
    """
    diagrams: list[str] = []

    def _store(body: str) -> str:
        diagrams.append(textwrap.dedent(body).strip("\n"))
        placeholder = DIAGRAM_PLACEHOLDER.format(index=len(diagrams) - 1)
        return f"\n\n{placeholder}\n\n"

    text = MERMAID_SHORTCODE_PATTERN.sub(lambda m: _store(m.group("body")), text)
    text = MERMAID_FENCE_PATTERN.sub(lambda m: _store(m.group("body")), text)
    return text, diagrams


def restore_diagrams(
    html: str, diagrams: cabc.Sequence[str], render: cabc.Callable[[str], str]
) -> str:
    """Swap diagram placeholders in converted HTML for ``render(source)``."""

    def _repl(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(diagrams):  # pragma: no cover - placeholder typed by hand
            return match.group(0)
        return render(diagrams[index])

    return DIAGRAM_SLOT_PATTERN.sub(_repl, html)


def expand_hints(text: str) -> str:
    """Turn ``hint`` shortcodes into ``md_in_html`` container blocks."""

    def _open(match: re.Match[str]) -> str:
        args = shortcode_args(match.group("args"))
        classes = ["book-hint"]
        classes.extend(arg for arg in args if arg in HINT_KINDS)
        return f'\n\n<div class="{" ".join(classes)}" markdown="1">\n\n'

    text = HINT_OPEN_PATTERN.sub(_open, text)
    return HINT_CLOSE_PATTERN.sub("\n\n</div>\n\n", text)


def replace_references(text: str, resolve: cabc.Callable[[str], str]) -> str:
    """Replace ``relref``/``ref`` shortcodes with ``resolve(target)``."""

    def _repl(match: re.Match[str]) -> str:
        args = shortcode_args(match.group("args"))
        if not args:
            return match.group(0)
        return resolve(args[0])

    return REF_SHORTCODE_PATTERN.sub(_repl, text)


def find_shortcodes(text: str) -> list[Shortcode]:
    """Return every shortcode tag still present in ``text``."""
    return [
        Shortcode(
            name=match.group("name"),
            closing=bool(match.group("closing")),
            args=shortcode_args(match.group("args") or ""),
        )
        for match in SHORTCODE_PATTERN.finditer(text)
    ]


__all__ = [
    "DIAGRAM_PLACEHOLDER",
    "SHORTCODE_PATTERN",
    "Shortcode",
    "expand_hints",
    "extract_diagrams",
    "find_shortcodes",
    "replace_references",
    "restore_diagrams",
    "shortcode_args",
]
