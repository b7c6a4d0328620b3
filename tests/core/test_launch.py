"""Tests for launch.toml parsing."""

from pathlib import Path

import pytest

from function_run.core.errors import ExitCode, LaunchDescriptorError
from function_run.core.launch import load_launch_descriptor


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "launch.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_processes_keep_declaration_order(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[[processes]]
type = "worker"
command = "bin/worker"

[[processes]]
type = "web"
command = "java"
args = ["-jar", "runtime.jar"]
""",
    )

    descriptor = load_launch_descriptor(path)

    assert [p.type for p in descriptor.processes] == ["worker", "web"]
    web = descriptor.find_process("web")
    assert web is not None
    assert web.argv() == ["java", "-jar", "runtime.jar"]
    assert descriptor.find_process("console") is None


def test_command_array_is_split_into_args(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[[processes]]
type = "web"
command = ["bash", "-c"]
args = ["exec server"]
""",
    )

    web = load_launch_descriptor(path).find_process("web")

    assert web is not None
    assert web.argv() == ["bash", "-c", "exec server"]


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[[labels]]
key = "a"

[[processes]]
type = "web"
command = "server"
direct = true
""",
    )

    assert load_launch_descriptor(path).find_process("web") is not None


def test_empty_descriptor_has_no_processes(tmp_path: Path) -> None:
    assert load_launch_descriptor(_write(tmp_path, "")).processes == []


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LaunchDescriptorError, match="not found") as exc_info:
        load_launch_descriptor(tmp_path / "launch.toml")

    assert exc_info.value.exit_code == ExitCode.LAUNCH_FAILED


def test_invalid_toml(tmp_path: Path) -> None:
    with pytest.raises(LaunchDescriptorError, match="not valid TOML"):
        load_launch_descriptor(_write(tmp_path, "[[processes]\n"))


def test_duplicate_process_types_are_rejected(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[[processes]]
type = "web"
command = "a"

[[processes]]
type = "web"
command = "b"
""",
    )

    with pytest.raises(LaunchDescriptorError, match="duplicate"):
        load_launch_descriptor(path)


def test_process_without_command_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, '[[processes]]\ntype = "web"\n')

    with pytest.raises(LaunchDescriptorError, match="malformed"):
        load_launch_descriptor(path)


def test_non_utf8_descriptor_is_launch_failure(tmp_path: Path) -> None:
    path = tmp_path / "launch.toml"
    path.write_bytes(b'[[processes]]\ntype = "web"\ncommand = "\xff"\n')

    with pytest.raises(LaunchDescriptorError, match="UTF-8") as exc_info:
        load_launch_descriptor(path)

    assert exc_info.value.exit_code == ExitCode.LAUNCH_FAILED
