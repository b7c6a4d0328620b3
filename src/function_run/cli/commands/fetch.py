import click
import semver

from function_run.cli.commands.shared import (
    allow_yanked_option,
    buildpack_argument,
    version_option,
)
from function_run.cli.error_boundary import cli_error_boundary
from function_run.cli.output import machine_output
from function_run.core.buildpack import Buildpack
from function_run.core.context import FunctionRunContext
from function_run.core.orchestrator import materialize


@click.command("fetch")
@buildpack_argument
@version_option
@allow_yanked_option
@click.pass_obj
@cli_error_boundary
def fetch_cmd(
    ctx: FunctionRunContext,
    buildpack: Buildpack,
    version: semver.Version,
    allow_yanked: bool,
) -> None:
    """Download and unpack BUILDPACK without running it.

    Prints the buildpack directory on stdout.
    """
    ctx.layout.prepare()
    materialized = materialize(ctx, buildpack, version, allow_yanked=allow_yanked)
    if not materialized.reused:
        ctx.feedback.success(f"✓ Unpacked {buildpack}-{version}")
    machine_output(str(materialized.buildpack_dir))
