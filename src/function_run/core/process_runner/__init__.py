"""Process runner subpackage."""

from function_run.core.process_runner.abc import ProcessResult, ProcessRunner
from function_run.core.process_runner.real import RealProcessRunner

__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "RealProcessRunner",
]
