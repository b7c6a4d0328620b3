"""Output utilities for CLI commands with clear intent.

user_output() writes human-facing text to stderr; machine_output() writes
data meant for pipes and scripts to stdout.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Output informational message for the user (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Output structured data for machine consumption (stdout)."""
    click.echo(message, nl=nl)
