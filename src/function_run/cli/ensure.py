"""CLI invariant checks with styled output.

Ensure methods print a red "Error:" line on stderr and exit, so commands can
state their preconditions inline instead of branching on every check.
"""

import click

from function_run.cli.output import user_output


class Ensure:
    """Helper class for asserting CLI invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str, *, exit_code: int = 1) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.
            exit_code: Process exit status on failure

        Raises:
            SystemExit: If condition is false
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(exit_code)

    @staticmethod
    def not_none[T](value: T | None, error_message: str, *, exit_code: int = 1) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Takes `T | None` and returns `T`, narrowing the type for callers.

        Raises:
            SystemExit: If value is None
        """
        if value is None:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(exit_code)
        return value
