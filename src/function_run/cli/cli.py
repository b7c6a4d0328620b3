import logging
from pathlib import Path

import click

from function_run.cli.commands.config import config_group
from function_run.cli.commands.entries import entries_cmd
from function_run.cli.commands.fetch import fetch_cmd
from function_run.cli.commands.run import run_cmd
from function_run.cli.ensure import Ensure
from function_run.cli.error_boundary import exit_with_error
from function_run.core.config_store import default_config_dir
from function_run.core.context import create_context
from function_run.core.errors import ExitCode, FunctionRunError

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags
CONFIG_DIR_ENV = "FUNCTION_RUN_CONFIG_DIR"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="function-run")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=CONFIG_DIR_ENV,
    default=None,
    help="Config root holding config.toml, layers and buildpacks [default: ~/.function-run].",
)
@click.option("--debug", is_flag=True, help="Log debug output to stderr.")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors.")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, debug: bool, quiet: bool) -> None:
    """Fetch a buildpack from the buildpack registry and run it locally."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is not None:
        return

    if config_dir is None:
        config_dir = Ensure.not_none(
            default_config_dir(), "Could not find HOME DIR.", exit_code=int(ExitCode.NO_HOME_DIR)
        )

    try:
        ctx.obj = create_context(config_root=config_dir, quiet=quiet)
    except FunctionRunError as e:
        exit_with_error(e)


cli.add_command(config_group)
cli.add_command(entries_cmd)
cli.add_command(fetch_cmd)
cli.add_command(run_cmd)


def main() -> None:
    """CLI entry point used by the `function-run` console script."""
    cli()
