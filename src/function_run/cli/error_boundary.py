"""Error boundary handling for CLI commands.

Catches FunctionRunError at CLI entry points and displays a clean error
message without a stack trace, exiting with the error's documented exit code.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any

import click

from function_run.cli.output import user_output
from function_run.core.errors import FunctionRunError

logger = logging.getLogger(__name__)


def exit_with_error(error: FunctionRunError) -> None:
    """Report an error on stderr and terminate with its exit code."""
    logger.debug("Exception details:", exc_info=error)
    user_output(click.style("Error: ", fg="red") + str(error))
    raise SystemExit(int(error.exit_code))


def cli_error_boundary[T: Callable[..., Any]](func: T) -> T:
    """Decorator that turns FunctionRunError into a styled message and exit code.

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @click.pass_obj
        @cli_error_boundary
        def my_command(ctx):
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FunctionRunError as e:
            exit_with_error(e)

    return wrapper  # type: ignore[return-value]
