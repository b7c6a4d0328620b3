"""Image registry subpackage.

This subpackage provides the registry pull interface with a requests-backed
implementation; tests use the fake in tests/fakes.
"""

from function_run.core.image_registry.abc import ImageRegistry
from function_run.core.image_registry.manifest import Manifest
from function_run.core.image_registry.real import RealImageRegistry

__all__ = [
    "ImageRegistry",
    "Manifest",
    "RealImageRegistry",
]
