"""Tests for the ``book`` command-line interface.

The command functions are called directly so the tests can inspect printed
output and the ``SystemExit`` codes that CI relies on: ``1`` for invalid
content or configuration and ``2`` for theme template failures.
``configure_logging`` is patched out with pytest-mock so the commands do not
replace pytest's logging handlers.
"""

from __future__ import annotations

import logging
import typing as typ

import pytest

from provider_book import cli

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def _quiet_logging(mocker: MockerFixture) -> None:
    """Keep the commands from reconfiguring the root logger."""
    mocker.patch.object(cli, "configure_logging")


def test_build_prints_written_pages(
    sample_book: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A successful build lists every page it wrote."""
    monkeypatch.chdir(tmp_path)

    cli.build(config=sample_book)

    out = capsys.readouterr().out.splitlines()
    assert "wrote public/index.html" in out
    assert "wrote public/docs/getting-started/index.html" in out
    assert len(out) == 5


def test_build_overrides_output_dir_and_base_url(
    sample_book: Path, tmp_path: Path
) -> None:
    """``--output-dir`` and ``--base-url`` replace the configured values."""
    target = tmp_path / "site"

    cli.build(config=sample_book, output_dir=target, base_url="https://docs.example.net")

    html = (target / "docs" / "getting-started" / "index.html").read_text(
        encoding="utf-8"
    )
    assert 'href="/docs/core-concepts/"' in html
    assert "https://docs.example.net/docs/getting-started/" in html
    assert not (tmp_path / "public").exists()


def test_build_drafts_flag(
    write_page: typ.Any, write_config: cabc.Callable[[str], Path], tmp_path: Path
) -> None:
    """``--build-drafts`` renders pages marked as drafts."""
    write_page("wip.md", "WIP", extra="draft: true")
    config = write_config("")

    cli.build(config=config)
    assert not (tmp_path / "public" / "wip" / "index.html").exists()

    cli.build(config=config, build_drafts=True)
    assert (tmp_path / "public" / "wip" / "index.html").exists()


def test_missing_title_exits_with_file_path(
    write_page: typ.Any,
    write_config: cabc.Callable[[str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Invalid headers exit with status 1 and name the offending file."""
    write_page("docs/broken.md", None, extra="weight: 1")

    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=write_config(""))

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "docs/broken.md" in err
    assert "missing required field 'title'" in err


def test_conflict_exits_with_status_one(
    write_page: typ.Any,
    write_config: cabc.Callable[[str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Colliding output paths are fatal."""
    write_page("guide.md", "Guide")
    write_page("guide/_index.md", "Guide Section")

    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=write_config(""))

    assert excinfo.value.code == 1
    assert "guide/index.html" in capsys.readouterr().err


def test_missing_config_exits_with_status_one(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A missing configuration file is reported, not raised."""
    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=tmp_path / "book.yaml")

    assert excinfo.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_template_errors_exit_with_status_two(
    sample_book: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Broken theme templates exit with status 2."""
    layouts = tmp_path / "layouts"
    layouts.mkdir()
    (layouts / "docs.jinja").write_text(
        "{{ page.title | no_such_filter }}\n", encoding="utf-8"
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=sample_book)

    assert excinfo.value.code == 2
    assert "no_such_filter" in capsys.readouterr().err


def test_unresolved_references_are_summarised(
    write_page: typ.Any,
    write_config: cabc.Callable[[str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Broken links do not fail the build but are counted on stderr."""
    write_page("page.md", "Page", body="[gone](gone.md)\n")

    cli.build(config=write_config(""))

    assert "1 unresolved references" in capsys.readouterr().err


def test_serve_builds_dev_server(sample_book: Path, mocker: MockerFixture) -> None:
    """``serve`` forwards its options to ``DevServer``."""
    server_cls = mocker.patch.object(cli, "DevServer")

    cli.serve(config=sample_book, port=8080, build_drafts=True, poll_interval=0.5)

    server_cls.assert_called_once_with(
        config_path=sample_book,
        host="127.0.0.1",
        port=8080,
        output_dir=None,
        include_drafts=True,
        poll_interval=0.5,
    )
    server_cls.return_value.serve_forever.assert_called_once_with()


@pytest.fixture
def restore_root_logger() -> cabc.Iterator[logging.Logger]:
    """Restore the root logger's handlers and level after the test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_levels(
    mocker: MockerFixture, restore_root_logger: logging.Logger
) -> None:
    """``--verbose`` switches the root logger to debug."""
    mocker.stopall()

    cli.configure_logging(verbose=True)
    assert restore_root_logger.level == logging.DEBUG

    cli.configure_logging()
    assert restore_root_logger.level == logging.INFO
