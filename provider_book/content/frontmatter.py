r"""Split content files into a metadata header and a Markdown body.

Headers are YAML between ``---`` fences or TOML between ``+++`` fences, the
two formats the book's content has always used. python-frontmatter detects
the fence style and splits the file; the header itself is parsed with
ruamel.yaml (YAML 1.2, so ``yes`` stays a string) or tomllib. Anything
without a header is a hard error: a file without one is almost always a
copy/paste accident.

Example
-------
>>> from provider_book.content.frontmatter import parse_front_matter
>>> meta, body = parse_front_matter("---\ntitle: Intro\nweight: 2\n---\nHello\n")
>>> meta["title"], meta["weight"], body
('Intro', 2, 'Hello\n')
"""

from __future__ import annotations

import re
import tomllib
import typing as typ

import frontmatter
from frontmatter.default_handlers import BaseHandler, YAMLHandler
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError


class FrontMatterError(ValueError):
    """Raised when a header is missing, unterminated, or unparsable."""


class BookYAMLHandler(YAMLHandler):
    """``---`` fenced headers loaded with ruamel.yaml's safe YAML 1.2 loader."""

    def load(self, fm: str, **kwargs: object) -> typ.Any:
        loader = YAML(typ="safe")
        loader.version = (1, 2)
        try:
            return loader.load(fm)
        except YAMLError as exc:
            problem = getattr(exc, "problem", None) or str(exc)
            msg = f"invalid YAML front matter: {problem}"
            raise FrontMatterError(msg) from exc


class BookTOMLHandler(BaseHandler):
    """``+++`` fenced headers loaded with tomllib."""

    FM_BOUNDARY = re.compile(r"^\+{3,}\s*$", re.MULTILINE)
    START_DELIMITER = END_DELIMITER = "+++"

    def load(self, fm: str, **kwargs: object) -> typ.Any:
        try:
            return tomllib.loads(fm)
        except tomllib.TOMLDecodeError as exc:
            msg = f"invalid TOML front matter: {exc}"
            raise FrontMatterError(msg) from exc


HANDLERS: tuple[BaseHandler, ...] = (BookYAMLHandler(), BookTOMLHandler())


def _strip_fence_newline(body: str) -> str:
    """Drop the line break that ended the closing fence."""
    if body.startswith("\r\n"):
        return body[2:]
    if body.startswith("\n"):
        return body[1:]
    return body


def parse_front_matter(text: str) -> tuple[dict[str, typ.Any], str]:
    """Return the parsed header mapping and the remaining body.

    Parameters
    ----------
    text : str
        Full file contents, optionally starting with a UTF-8 BOM.

    Returns
    -------
    tuple[dict[str, Any], str]
        Header keys exactly as written and the body that follows the closing
        fence.

    Raises
    ------
    FrontMatterError
        If the file does not open with a fence, the fence is never closed, the
        header cannot be parsed, or it does not describe a mapping.
    """
    clean = text.lstrip("\ufeff")
    handler = frontmatter.detect_format(clean, HANDLERS)
    if handler is None:
        msg = "missing front matter header"
        raise FrontMatterError(msg)
    try:
        header, body = handler.split(clean)
    except ValueError as exc:
        msg = "front matter is not terminated"
        raise FrontMatterError(msg) from exc

    loaded = handler.load(header)
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        msg = "front matter must be a mapping"
        raise FrontMatterError(msg)
    return dict(loaded), _strip_fence_newline(body)


__all__ = ["FrontMatterError", "parse_front_matter"]
