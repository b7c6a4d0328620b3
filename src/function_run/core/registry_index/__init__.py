"""Registry index subpackage."""

from function_run.core.registry_index.abc import RegistryIndex
from function_run.core.registry_index.parsing import parse_registry_index
from function_run.core.registry_index.real import (
    DEFAULT_INDEX_HOST,
    INDEX_PATH_PREFIX,
    RealRegistryIndex,
)

__all__ = [
    "DEFAULT_INDEX_HOST",
    "INDEX_PATH_PREFIX",
    "RealRegistryIndex",
    "RegistryIndex",
    "parse_registry_index",
]
