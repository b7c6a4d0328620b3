"""Configuration data structures and loading.

Provides immutable config data loaded from <config_root>/config.toml.
A missing file means defaults; a present file with bad values is an error.
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit

from function_run.core.errors import ConfigError, FilesystemError
from function_run.core.registry_index.real import DEFAULT_INDEX_HOST

CONFIG_DIR_NAME = ".function-run"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_STACK_ID = "io.buildpacks.stacks.bionic"
DEFAULT_HTTP_TIMEOUT = 30.0


def default_config_dir() -> Path | None:
    """Find the default config dir, or None if HOME cannot be resolved."""
    try:
        return Path.home() / CONFIG_DIR_NAME
    except RuntimeError:
        return None


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable configuration data.

    Loaded once at CLI entry point and stored in FunctionRunContext.
    Timeouts are in seconds; None means wait indefinitely.
    """

    index_host: str = DEFAULT_INDEX_HOST
    stack_id: str = DEFAULT_STACK_ID
    http_timeout: float | None = DEFAULT_HTTP_TIMEOUT
    detect_timeout: float | None = None
    build_timeout: float | None = None


def _read_str(data: dict[str, Any], key: str, default: str, path: Path) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{key}' in {path} must be a non-empty string")
    return value


def _read_timeout(
    data: dict[str, Any], key: str, default: float | None, path: Path
) -> float | None:
    if key not in data:
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigError(f"'{key}' in {path} must be a positive number of seconds")
    return float(value)


def parse_config(data: dict[str, Any], path: Path) -> GlobalConfig:
    """Build a GlobalConfig from decoded TOML, applying defaults.

    Raises:
        ConfigError: If a value has the wrong type or range
    """
    defaults = GlobalConfig()
    return GlobalConfig(
        index_host=_read_str(data, "index_host", defaults.index_host, path),
        stack_id=_read_str(data, "stack_id", defaults.stack_id, path),
        http_timeout=_read_timeout(data, "http_timeout", defaults.http_timeout, path),
        detect_timeout=_read_timeout(data, "detect_timeout", defaults.detect_timeout, path),
        build_timeout=_read_timeout(data, "build_timeout", defaults.build_timeout, path),
    )


def render_config(config: GlobalConfig) -> str:
    """Serialize a GlobalConfig as TOML, omitting unset timeouts."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("function-run configuration"))
    doc["index_host"] = config.index_host
    doc["stack_id"] = config.stack_id
    for key in ("http_timeout", "detect_timeout", "build_timeout"):
        value = getattr(config, key)
        if value is not None:
            doc[key] = value
    return tomlkit.dumps(doc)


class ConfigStore(ABC):
    """Abstract interface for config access.

    Provides dependency injection for config, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a config file exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load config, returning defaults when none exists.

        Raises:
            ConfigError: If the config is malformed
            FilesystemError: If the file cannot be read
        """
        ...

    @abstractmethod
    def save(self, config: GlobalConfig) -> None:
        """Persist config.

        Raises:
            FilesystemError: If the file cannot be written
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Path to the config file (for messages)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation reading/writing <config_root>/config.toml."""

    def __init__(self, config_root: Path) -> None:
        self._config_root = config_root

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()
        if not config_path.exists():
            return GlobalConfig()

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise FilesystemError(f"Cannot read config {config_path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigError(f"Config {config_path} is not valid UTF-8: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        return parse_config(data, config_path)

    def save(self, config: GlobalConfig) -> None:
        config_path = self.path()
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(render_config(config), encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"Cannot write config {config_path}: {e}") from e

    def path(self) -> Path:
        return self._config_root / CONFIG_FILE_NAME


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = no config file)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            return GlobalConfig()
        return self._config

    def save(self, config: GlobalConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/function-run") / CONFIG_FILE_NAME
