"""Serialize the client-side search index.

The theme's ``search.js`` downloads ``search-index.json`` and filters it in
the browser; ranking happens there. This module only extracts plain text from
rendered pages and writes the entries in a stable order so rebuilds stay
byte-identical.
"""

from __future__ import annotations

import json
import re
import typing as typ

from bs4 import BeautifulSoup

if typ.TYPE_CHECKING:
    import collections.abc as cabc

SKIPPED_TAGS = ["script", "style"]
WHITESPACE_PATTERN = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    """Return the visible text of ``html`` with whitespace collapsed."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(SKIPPED_TAGS):
        element.decompose()
    text = soup.get_text(" ", strip=True)
    return WHITESPACE_PATTERN.sub(" ", text)


def search_entry(
    *, href: str, title: str, section: str | None, html: str
) -> dict[str, str]:
    """Build one search index record for a rendered page."""
    return {
        "href": href,
        "title": title,
        "section": section or "",
        "content": html_to_text(html),
    }


def serialize_search_index(
    entries: cabc.Iterable[dict[str, str]], *, minify: bool = False
) -> str:
    """Return the JSON document for ``entries`` ordered by ``href``.

    Parameters
    ----------
    entries : Iterable[dict[str, str]]
        Records produced by :func:`search_entry`.
    minify : bool, optional
        Drop indentation and separator whitespace.

    Returns
    -------
    str
        JSON array where each record gains a sequential ``id``.
    """
    ordered = sorted(entries, key=lambda entry: entry["href"])
    records = [{"id": idx, **entry} for idx, entry in enumerate(ordered)]
    if minify:
        return json.dumps(records, sort_keys=True, separators=(",", ":"))
    return json.dumps(records, sort_keys=True, indent=2) + "\n"


__all__ = ["html_to_text", "search_entry", "serialize_search_index"]
