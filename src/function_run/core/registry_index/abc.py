"""Registry index interface.

The registry index is a line-oriented metadata feed mapping a buildpack and
version to an image address. This interface keeps the HTTP transport
injectable so tests run without network access.
"""

from abc import ABC, abstractmethod

from function_run.core.buildpack import Buildpack, RegistryEntry


class RegistryIndex(ABC):
    """Abstract interface for reading the buildpack registry index."""

    @abstractmethod
    def fetch_entries(self, buildpack: Buildpack) -> list[RegistryEntry]:
        """Fetch every published entry for a buildpack.

        Args:
            buildpack: Buildpack identifier to look up

        Returns:
            Entries in index file line order

        Raises:
            RegistryIndexError: If the index cannot be fetched or any line
                fails to decode. Partial results are never returned.
        """
        ...
