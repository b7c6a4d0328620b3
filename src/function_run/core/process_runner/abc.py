"""Process execution interface for buildpack executables.

This abstraction enables testing the lifecycle without spawning real
processes: tests inject a fake runner that records invocations and returns
scripted results.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProcessResult:
    """Result of running a process to completion.

    Attributes:
        returncode: Exit status, or None if the process could not be started
            or was killed after exceeding its timeout
        output: Captured stdout and stderr (empty when not capturing)
        error: Description of a spawn failure or timeout, None otherwise
    """

    returncode: int | None
    output: str = ""
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner(ABC):
    """Abstract interface for running external executables."""

    @abstractmethod
    def run(
        self,
        args: list[str | Path],
        env: dict[str, str],
        *,
        capture_output: bool,
        timeout: float | None,
    ) -> ProcessResult:
        """Run a process and wait for it, never raising on failure.

        Args:
            args: Executable followed by its positional arguments
            env: Variables layered over the inherited environment
            capture_output: Capture stdout and stderr combined instead of
                inheriting the parent's streams
            timeout: Seconds to wait before killing the process, None to wait
                indefinitely

        Returns:
            ProcessResult; spawn failures and timeouts are reported through
            returncode=None and error
        """
        ...

    @abstractmethod
    def run_interactive(self, args: list[str]) -> int:
        """Run a process with inherited standard streams and wait for it.

        Returns:
            Exit status; a process killed by signal N reports 128 + N

        Raises:
            OSError: If the process cannot be started
        """
        ...
