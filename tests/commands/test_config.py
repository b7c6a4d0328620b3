"""Tests for the config command group."""

from pathlib import Path

from click.testing import CliRunner

from function_run.cli.cli import cli
from function_run.core.config_store import GlobalConfig, InMemoryConfigStore
from function_run.core.context import FunctionRunContext


def test_config_show_prints_effective_values(tmp_path: Path) -> None:
    config = GlobalConfig(stack_id="heroku-20", build_timeout=300.0)
    ctx = FunctionRunContext.for_test(tmp_path, config=config)

    result = CliRunner().invoke(cli, ["config", "show"], obj=ctx)

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert f"config_root={tmp_path}" in lines
    assert "stack_id=heroku-20" in lines
    assert "http_timeout=30.0" in lines
    assert "detect_timeout=unset" in lines
    assert "build_timeout=300.0" in lines


def test_config_init_writes_file(tmp_path: Path) -> None:
    store = InMemoryConfigStore()
    ctx = FunctionRunContext.for_test(tmp_path, config_store=store)

    result = CliRunner().invoke(cli, ["config", "init"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert store.exists()
    assert "✓ Wrote /fake/function-run/config.toml" in result.stderr


def test_config_init_refuses_to_overwrite(tmp_path: Path) -> None:
    store = InMemoryConfigStore(GlobalConfig(stack_id="keep-me"))
    ctx = FunctionRunContext.for_test(
        tmp_path, config_store=store, config=GlobalConfig(stack_id="other")
    )

    result = CliRunner().invoke(cli, ["config", "init"], obj=ctx)

    assert result.exit_code == 1
    assert "--force" in result.stderr
    assert store.load().stack_id == "keep-me"


def test_config_init_force_overwrites(tmp_path: Path) -> None:
    store = InMemoryConfigStore(GlobalConfig(stack_id="old"))
    ctx = FunctionRunContext.for_test(
        tmp_path, config_store=store, config=GlobalConfig(stack_id="new")
    )

    result = CliRunner().invoke(cli, ["config", "init", "--force"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert store.load().stack_id == "new"
