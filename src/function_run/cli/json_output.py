"""JSON output utilities for CLI commands with machine-parseable output."""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from function_run.cli.output import machine_output
from function_run.core.errors import FunctionRunError


class ErrorResponse(BaseModel):
    """Pydantic model for error JSON responses.

    Attributes:
        error: Error message
        error_type: Error class name (e.g., "NoVersionFoundError")
        exit_code: Exit code for the process
    """

    model_config = ConfigDict(strict=True)

    error: str
    error_type: str
    exit_code: int = Field(default=1, ge=0, le=255)


def emit_json(data: dict[str, Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    For Pydantic models, call model.model_dump(mode='json') before
    passing to this function.
    """
    machine_output(json.dumps(data, indent=2))


def emit_json_error(error: str, error_type: str, exit_code: int = 1) -> None:
    """Output error as JSON and exit.

    Raises:
        SystemExit: Always raises to terminate with specified exit code
    """
    error_response = ErrorResponse(
        error=error,
        error_type=error_type,
        exit_code=exit_code,
    )
    emit_json(error_response.model_dump(mode="json"))
    raise SystemExit(exit_code)


def json_error_boundary(func: Callable) -> Callable:
    """Decorator emitting FunctionRunError as JSON when ``format == "json"``.

    In text mode the error is re-raised for the regular error boundary.

    Example:
        @click.command()
        @click.option("--format", type=click.Choice(["text", "json"]), default="text")
        @cli_error_boundary
        @json_error_boundary
        def my_command(format: str) -> None:
            ...
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FunctionRunError as e:
            if kwargs.get("format", "text") == "json":
                emit_json_error(str(e), type(e).__name__, exit_code=int(e.exit_code))
            raise

    return wrapper
