"""Real process execution using subprocess."""

import logging
import os
import subprocess
from pathlib import Path

from function_run.core.process_runner.abc import ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def _exit_status(returncode: int) -> int:
    # Negative return codes mean the child died from a signal
    if returncode < 0:
        return 128 - returncode
    return returncode


class RealProcessRunner(ProcessRunner):
    """Production implementation using subprocess.run()."""

    def run(
        self,
        args: list[str | Path],
        env: dict[str, str],
        *,
        capture_output: bool,
        timeout: float | None,
    ) -> ProcessResult:
        cmd = [str(arg) for arg in args]
        logger.debug("Running process: cmd=%s, env=%s, timeout=%s", cmd, env, timeout)
        try:
            completed = subprocess.run(
                cmd,
                env={**os.environ, **env},
                stdout=subprocess.PIPE if capture_output else None,
                stderr=subprocess.STDOUT if capture_output else None,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                returncode=None,
                output=_decode(e.output),
                error=f"{cmd[0]} timed out after {timeout} seconds",
            )
        except OSError as e:
            return ProcessResult(returncode=None, error=f"Failed to start {cmd[0]}: {e}")

        logger.debug("Process exited: cmd=%s, returncode=%d", cmd[0], completed.returncode)
        return ProcessResult(returncode=completed.returncode, output=_decode(completed.stdout))

    def run_interactive(self, args: list[str]) -> int:
        logger.debug("Running interactive process: cmd=%s", args)
        completed = subprocess.run(args, check=False)
        return _exit_status(completed.returncode)
