"""Launch descriptor (``launch.toml``) written by a buildpack's build phase.

Example:
    [[processes]]
    type = "web"
    command = "java"
    args = ["-jar", "runtime.jar", "serve", "/workspace"]
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from function_run.core.errors import LaunchDescriptorError

LAUNCH_FILE_NAME = "launch.toml"
WEB_PROCESS_TYPE = "web"


class ProcessDefinition(BaseModel):
    """A named process the application image can run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    command: str
    args: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def _split_command_array(cls, data: Any) -> Any:
        # Newer buildpack APIs write command as an array; fold the tail into args
        if isinstance(data, dict) and isinstance(data.get("command"), list):
            command = list(data["command"])
            if not command:
                raise ValueError("command must not be empty")
            data = {**data, "command": command[0], "args": command[1:] + list(data.get("args", []))}
        return data

    def argv(self) -> list[str]:
        return [self.command, *self.args]


class LaunchDescriptor(BaseModel):
    """Ordered process definitions with unique types."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    processes: list[ProcessDefinition] = []

    @model_validator(mode="after")
    def _check_unique_types(self) -> "LaunchDescriptor":
        seen: set[str] = set()
        for process in self.processes:
            if process.type in seen:
                raise ValueError(f"duplicate process type {process.type!r}")
            seen.add(process.type)
        return self

    def find_process(self, process_type: str) -> ProcessDefinition | None:
        for process in self.processes:
            if process.type == process_type:
                return process
        return None


def load_launch_descriptor(path: Path) -> LaunchDescriptor:
    """Read and validate a launch.toml file.

    Raises:
        LaunchDescriptorError: If the file is missing, is not valid TOML, or
            does not match the descriptor schema
    """
    if not path.exists():
        raise LaunchDescriptorError(f"Launch descriptor not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LaunchDescriptorError(f"Cannot read launch descriptor {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise LaunchDescriptorError(f"Launch descriptor {path} is not valid UTF-8: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise LaunchDescriptorError(f"Launch descriptor {path} is not valid TOML: {e}") from e

    try:
        return LaunchDescriptor.model_validate(data)
    except ValidationError as e:
        raise LaunchDescriptorError(f"Launch descriptor {path} is malformed: {e}") from e
