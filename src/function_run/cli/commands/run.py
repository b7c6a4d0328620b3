import click
import semver

from function_run.cli.commands.shared import (
    allow_yanked_option,
    buildpack_argument,
    version_option,
)
from function_run.cli.error_boundary import cli_error_boundary
from function_run.core.buildpack import Buildpack
from function_run.core.context import FunctionRunContext
from function_run.core.lifecycle import LifecycleOutcome, LifecycleState
from function_run.core.orchestrator import run_buildpack


def _report_outcome(ctx: FunctionRunContext, outcome: LifecycleOutcome) -> None:
    """Print the terminal lifecycle state for the user."""
    if outcome.state is LifecycleState.NO_WEB_PROCESS:
        ctx.feedback.info(outcome.message or "No web process to launch")
    elif outcome.state is LifecycleState.RUNNING:
        if outcome.exit_code != 0 and outcome.process is not None:
            ctx.feedback.error(f"{outcome.process.command} exited with status {outcome.exit_code}")
    elif outcome.message:
        ctx.feedback.error(outcome.message)


@click.command("run")
@buildpack_argument
@version_option
@allow_yanked_option
@click.pass_obj
@cli_error_boundary
def run_cmd(
    ctx: FunctionRunContext,
    buildpack: Buildpack,
    version: semver.Version,
    allow_yanked: bool,
) -> None:
    """Fetch BUILDPACK, run detect and build, then start its web process.

    BUILDPACK is NAMESPACE/NAME as published in the buildpack registry.
    Exits 200 when detection fails, 201 when the build fails, and with the
    web process's own status once it exits.
    """
    outcome = run_buildpack(ctx, buildpack, version, allow_yanked=allow_yanked)
    _report_outcome(ctx, outcome)
    raise SystemExit(outcome.exit_code)
