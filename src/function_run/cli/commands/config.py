import click

from function_run.cli.ensure import Ensure
from function_run.cli.error_boundary import cli_error_boundary
from function_run.cli.output import machine_output, user_output
from function_run.core.config_store import GlobalConfig
from function_run.core.context import FunctionRunContext


def _format_value(value: object) -> str:
    if value is None:
        return "unset"
    return str(value)


@click.group("config")
def config_group() -> None:
    """Manage function-run configuration."""


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_obj
@cli_error_boundary
def init_cmd(ctx: FunctionRunContext, force: bool) -> None:
    """Write a config file with the current settings."""
    Ensure.invariant(
        force or not ctx.config_store.exists(),
        f"Config already exists at {ctx.config_store.path()}\nUse --force to overwrite it.",
    )

    ctx.config_store.save(ctx.config)
    ctx.feedback.success(f"✓ Wrote {ctx.config_store.path()}")


@config_group.command("show")
@click.pass_obj
@cli_error_boundary
def show_cmd(ctx: FunctionRunContext) -> None:
    """Print the effective configuration."""
    config: GlobalConfig = ctx.config
    user_output(click.style(f"Config: {ctx.config_store.path()}", bold=True))
    machine_output(f"config_root={ctx.layout.root}")
    machine_output(f"index_host={config.index_host}")
    machine_output(f"stack_id={config.stack_id}")
    machine_output(f"http_timeout={_format_value(config.http_timeout)}")
    machine_output(f"detect_timeout={_format_value(config.detect_timeout)}")
    machine_output(f"build_timeout={_format_value(config.build_timeout)}")
