"""Integration tests for RealProcessRunner.

Most tests run small POSIX shell scripts written to tmp_path; signal mapping
is verified with a mocked subprocess.run.
"""

import stat
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from function_run.core.process_runner.real import RealProcessRunner


def _script(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


def test_run_passes_arguments_and_layers_environment(tmp_path: Path) -> None:
    """Positional args reach the script and env is layered over os.environ."""
    script = _script(tmp_path, "detect", 'echo "$1 $2 $CNB_STACK_ID"; test -n "$PATH"')

    result = RealProcessRunner().run(
        [script, tmp_path / "platform", "plan.toml"],
        {"CNB_STACK_ID": "stack"},
        capture_output=True,
        timeout=10,
    )

    assert result.success
    assert result.output == f"{tmp_path / 'platform'} plan.toml stack\n"
    assert result.error is None


def test_run_captures_stderr_with_stdout(tmp_path: Path) -> None:
    script = _script(tmp_path, "build", "echo out; echo err >&2; exit 3")

    result = RealProcessRunner().run([script], {}, capture_output=True, timeout=10)

    assert result.returncode == 3
    assert not result.success
    assert "out" in result.output
    assert "err" in result.output


def test_run_without_capture_returns_empty_output(tmp_path: Path) -> None:
    script = _script(tmp_path, "detect", "echo hidden")

    result = RealProcessRunner().run([script], {}, capture_output=False, timeout=10)

    assert result.returncode == 0
    assert result.output == ""


def test_run_missing_executable_reports_error(tmp_path: Path) -> None:
    result = RealProcessRunner().run(
        [tmp_path / "bin" / "detect"], {}, capture_output=False, timeout=None
    )

    assert result.returncode is None
    assert result.error is not None
    assert result.error.startswith("Failed to start")


def test_run_timeout_kills_process(tmp_path: Path) -> None:
    script = _script(tmp_path, "build", "echo started; exec sleep 30")

    result = RealProcessRunner().run([script], {}, capture_output=True, timeout=0.5)

    assert result.returncode is None
    assert result.error is not None
    assert "timed out" in result.error


def test_run_interactive_returns_exit_status(tmp_path: Path) -> None:
    script = _script(tmp_path, "web", "exit 7")

    assert RealProcessRunner().run_interactive([str(script)]) == 7


def test_run_interactive_maps_signal_to_128_plus_n() -> None:
    """A child killed by SIGTERM (returncode -15) reports 143."""
    completed = MagicMock()
    completed.returncode = -15

    with patch("subprocess.run", return_value=completed) as mock_run:
        exit_code = RealProcessRunner().run_interactive(["server"])

    assert exit_code == 143
    mock_run.assert_called_once_with(["server"], check=False)


def test_run_interactive_raises_for_missing_executable(tmp_path: Path) -> None:
    missing = str(tmp_path / "missing")

    with patch("subprocess.run", side_effect=FileNotFoundError(missing)):
        with pytest.raises(OSError, match="missing"):
            RealProcessRunner().run_interactive([missing])


def test_run_uses_subprocess_timeout_argument() -> None:
    completed = subprocess.CompletedProcess(args=["x"], returncode=0, stdout="")

    with patch("subprocess.run", return_value=completed) as mock_run:
        RealProcessRunner().run(["x"], {"A": "1"}, capture_output=True, timeout=12.5)

    kwargs = mock_run.call_args.kwargs
    assert kwargs["timeout"] == 12.5
    assert kwargs["env"]["A"] == "1"
    assert kwargs["stderr"] == subprocess.STDOUT
