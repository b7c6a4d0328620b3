"""Tests for the entries command."""

import json
from pathlib import Path

from click.testing import CliRunner

from function_run.cli.cli import cli
from function_run.core.buildpack import Buildpack
from function_run.core.context import FunctionRunContext
from tests.fakes.registry_index import FakeRegistryIndex
from tests.test_utils.entries import DEFAULT_ADDRESS, make_entry

BUILDPACK = Buildpack("heroku", "jvm-function-invoker")


def _ctx(tmp_path: Path) -> FunctionRunContext:
    index = FakeRegistryIndex(
        entries={
            BUILDPACK: [
                make_entry("0.5.1"),
                make_entry("0.5.2", yanked=True),
                make_entry("0.6.0"),
            ]
        }
    )
    return FunctionRunContext.for_test(tmp_path, registry_index=index)


def test_entries_table_hides_yanked_versions(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["entries"], obj=_ctx(tmp_path))

    assert result.exit_code == 0, result.output
    assert "0.5.1" in result.stderr
    assert "0.6.0" in result.stderr
    assert "0.5.2" not in result.stderr
    assert DEFAULT_ADDRESS in result.stderr


def test_entries_table_with_yanked_column(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["entries", "--show-yanked"], obj=_ctx(tmp_path))

    assert result.exit_code == 0, result.output
    assert "0.5.2" in result.stderr
    assert "yanked" in result.stderr


def test_entries_json_output(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["entries", "heroku/jvm-function-invoker", "--format", "json"], obj=_ctx(tmp_path)
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["buildpack"] == "heroku/jvm-function-invoker"
    assert data["index_path"] == "jv/m-/heroku_jvm-function-invoker"
    assert [entry["version"] for entry in data["entries"]] == ["0.5.1", "0.6.0"]
    assert data["entries"][0] == {
        "namespace": "heroku",
        "name": "jvm-function-invoker",
        "version": "0.5.1",
        "yanked": False,
        "address": DEFAULT_ADDRESS,
    }


def test_entries_for_buildpack_without_visible_versions(tmp_path: Path) -> None:
    other = Buildpack("acme", "go")
    hidden = make_entry("1.0.0", namespace="acme", name="go", yanked=True)
    index = FakeRegistryIndex(entries={other: [hidden]})
    ctx = FunctionRunContext.for_test(tmp_path, registry_index=index)

    result = CliRunner().invoke(cli, ["entries", "acme/go"], obj=ctx)

    assert result.exit_code == 0
    assert "No entries found for acme/go." in result.stderr
    assert index.fetch_calls == [other]


def test_entries_json_error(tmp_path: Path) -> None:
    ctx = FunctionRunContext.for_test(tmp_path, registry_index=FakeRegistryIndex())

    result = CliRunner().invoke(cli, ["entries", "acme/missing", "--format", "json"], obj=ctx)

    assert result.exit_code == 120
    data = json.loads(result.stdout)
    assert data["error_type"] == "RegistryIndexError"
    assert data["exit_code"] == 120
    assert "mi/ss/acme_missing" in data["error"]


def test_entries_text_error(tmp_path: Path) -> None:
    ctx = FunctionRunContext.for_test(tmp_path, registry_index=FakeRegistryIndex())

    result = CliRunner().invoke(cli, ["entries", "acme/missing"], obj=ctx)

    assert result.exit_code == 120
    assert result.stdout == ""
    assert "Error: " in result.stderr
