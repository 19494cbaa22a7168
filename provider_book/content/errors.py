"""Exceptions and warnings raised while loading the content tree."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class ContentError(ValueError):
    """Base class for fatal content problems tied to a source file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class ContentMetadataError(ContentError):
    """Raised when a metadata header is missing, unparsable, or invalid."""


class ContentConflictError(ContentError):
    """Raised when several content files resolve to the same output file."""

    def __init__(self, output_path: str, paths: cabc.Sequence[str]) -> None:
        self.output_path = output_path
        self.paths = tuple(sorted(paths))
        listed = ", ".join(self.paths)
        super().__init__(
            self.paths[0], f"'{output_path}' is produced by several files: {listed}"
        )


class ReferenceWarning(UserWarning):
    """A link or reference pointing at content that does not exist.

    Attributes
    ----------
    source : str
        Content-relative path of the file containing the reference.
    target : str
        Reference exactly as written in the source file.
    """

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"{source}: unresolved reference '{target}'")
        self.source = source
        self.target = target

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReferenceWarning):
            return NotImplemented
        return (self.source, self.target) == (other.source, other.target)

    def __hash__(self) -> int:
        return hash((self.source, self.target))


__all__ = [
    "ContentConflictError",
    "ContentError",
    "ContentMetadataError",
    "ReferenceWarning",
]
