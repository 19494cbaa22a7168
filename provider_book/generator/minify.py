"""Whitespace minification for production builds.

Only insignificant whitespace is removed: line breaks between tags go, other
runs collapse to one space, HTML comments are dropped, and CSS loses comments
and spacing around punctuation.
The contents of ``pre``, ``code``, ``textarea`` and ``script`` elements are
kept byte-for-byte.
"""

from __future__ import annotations

import re

PRESERVED_PATTERN = re.compile(
    r"<(pre|code|textarea|script)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL
)
HTML_COMMENT_PATTERN = re.compile(r"<!--(?!\[if).*?-->", re.DOTALL)
INTER_TAG_PATTERN = re.compile(r">\s*\n\s*<")
WHITESPACE_PATTERN = re.compile(r"\s+")
CSS_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
CSS_PUNCTUATION_PATTERN = re.compile(r"\s*([{};:,>])\s*")
PLACEHOLDER = "<\x00{index}\x00>"
PLACEHOLDER_PATTERN = re.compile(r"<\x00(\d+)\x00>")


def minify_html(html: str) -> str:
    """Collapse insignificant whitespace in ``html``."""
    preserved: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        preserved.append(match.group(0))
        return PLACEHOLDER.format(index=len(preserved) - 1)

    text = PRESERVED_PATTERN.sub(_stash, html)
    text = HTML_COMMENT_PATTERN.sub("", text)
    text = INTER_TAG_PATTERN.sub("><", text)
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    return PLACEHOLDER_PATTERN.sub(lambda m: preserved[int(m.group(1))], text)


def minify_css(css: str) -> str:
    """Strip comments and redundant whitespace from a stylesheet."""
    text = CSS_COMMENT_PATTERN.sub("", css)
    text = WHITESPACE_PATTERN.sub(" ", text)
    text = CSS_PUNCTUATION_PATTERN.sub(r"\1", text)
    return text.replace(";}", "}").strip()


__all__ = ["minify_css", "minify_html"]
