"""Shared dataclasses used by the site build pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from provider_book.content import ReferenceWarning


@dc.dataclass(slots=True)
class MenuEntry:
    """Structured data passed to the menu template macro.

    Attributes
    ----------
    title : str
        Label shown in the menu.
    href : str
        Target URL; external when the page sets ``bookHref``.
    active : bool
        ``True`` for the entry of the page being rendered.
    expanded : bool
        ``True`` when the entry's children are visible.
    is_section : bool
        ``True`` for directory-level entries.
    collapsible : bool
        ``True`` when the section was marked ``bookCollapseSection``.
    flat : bool
        ``True`` when the section was marked ``bookFlatSection``.
    external : bool
        ``True`` when ``href`` leaves the site.
    children : list[MenuEntry]
        Child entries in display order.
    """

    title: str
    href: str
    active: bool = False
    expanded: bool = True
    is_section: bool = False
    collapsible: bool = False
    flat: bool = False
    external: bool = False
    children: list[MenuEntry] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class ChildLink:
    """Entry in a section's listing of its direct children."""

    title: str
    href: str
    description: str | None = None


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a completed build.

    Attributes
    ----------
    output_dir : Path
        Directory the site was written to.
    pages : list[Path]
        Rendered page files, in display order.
    written : list[Path]
        Every file written, sorted.
    warnings : list[ReferenceWarning]
        Unresolved references, in the order they were found.
    """

    output_dir: Path
    pages: list[Path]
    written: list[Path]
    warnings: list[ReferenceWarning]


__all__ = ["BuildResult", "ChildLink", "MenuEntry"]
