"""Behaviour tests for content files that omit their title.

The feature file ``missing_title.feature`` runs the ``book build`` command
against a page whose header lacks ``title`` and checks the command fails with
status 1 while naming the offending file, which is what CI surfaces to the
author.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from provider_book import cli

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pytest_mock import MockerFixture

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "missing_title.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given(parsers.parse('a docs page "{rel_path}" whose header has no title'))
def given_untitled_page(
    write_page: typ.Any,
    write_config: cabc.Callable[[str], Path],
    scenario_state: dict[str, object],
    rel_path: str,
) -> None:
    """Write a page whose header only sets a weight."""
    write_page("docs/_index.md", "Documentation")
    write_page(rel_path, None, weight=1, body="Body.\n")
    scenario_state["config_path"] = write_config("")


@when("I run the book build command")
def when_run_build(
    scenario_state: dict[str, object],
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Invoke ``book build`` and capture its exit code and stderr."""
    mocker.patch.object(cli, "configure_logging")
    config_path = typ.cast("Path", scenario_state["config_path"])
    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=config_path)
    scenario_state["exit_code"] = excinfo.value.code
    scenario_state["stderr"] = capsys.readouterr().err


@then(parsers.parse("the command exits with status {code:d}"))
def then_exit_code(scenario_state: dict[str, object], code: int) -> None:
    """Verify the command's exit status."""
    assert scenario_state["exit_code"] == code


@then(parsers.parse('the error output names "{rel_path}"'))
def then_error_names_file(scenario_state: dict[str, object], rel_path: str) -> None:
    """Verify stderr points at the offending file."""
    stderr = typ.cast("str", scenario_state["stderr"])
    assert rel_path in stderr, f"expected {rel_path!r} in {stderr!r}"
    assert "missing required field 'title'" in stderr
