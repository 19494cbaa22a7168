"""Shared fixtures for building small books in temporary directories.

Most tests need a content tree and a ``book.yaml`` next to it. The fixtures
here write both under ``tmp_path`` so every test starts from a clean site and
no test touches the repository's own content.
"""

from __future__ import annotations

import typing as typ

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

PageWriter = typ.Callable[..., "Path"]


def _header(title: str | None, weight: int | None, extra: str) -> str:
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if weight is not None:
        lines.append(f"weight: {weight}")
    if extra:
        lines.append(extra.strip("\n"))
    lines.append("---")
    return "\n".join(lines) + "\n"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Return an empty content directory under ``tmp_path``."""
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def write_page(content_dir: Path) -> PageWriter:
    """Return a helper that writes a Markdown page with a YAML header."""

    def _write(
        rel_path: str,
        title: str | None = "Untitled",
        *,
        weight: int | None = None,
        body: str = "",
        extra: str = "",
    ) -> Path:
        path = content_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_header(title, weight, extra) + body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_config(tmp_path: Path) -> cabc.Callable[[str], Path]:
    """Return a helper that writes ``book.yaml`` with extra YAML appended."""

    def _write(extra: str = "") -> Path:
        path = tmp_path / "book.yaml"
        path.write_text(
            "title: Provider Book\n"
            "base_url: https://example.org/book/\n" + extra.strip("\n") + "\n",
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def sample_book(write_page: PageWriter, write_config: cabc.Callable[[str], Path]) -> Path:
    """Write a small book with a docs section and return its config path."""
    write_page("_index.md", "Provider Book", body="Welcome to the book.\n")
    write_page("docs/_index.md", "Documentation", weight=1, body="")
    write_page(
        "docs/getting-started.md",
        "Getting Started",
        weight=1,
        body=(
            "## Install\n\n"
            "Read [core concepts](core-concepts.md) next.\n\n"
            "```python\nprint('hi')\n```\n"
        ),
    )
    write_page(
        "docs/core-concepts.md",
        "Core Concepts",
        weight=2,
        body="## Resources\n\nSee {{< relref \"getting-started\" >}}.\n",
    )
    write_page(
        "docs/internal.md",
        "Internal Notes",
        weight=3,
        body="Secret text.\n",
        extra="bookHidden: true\nbookSearchExclude: true",
    )
    return write_config("")
