"""Registry index client backed by requests."""

import logging

import requests

from function_run.core.buildpack import Buildpack, RegistryEntry
from function_run.core.errors import RegistryIndexError
from function_run.core.registry_index.abc import RegistryIndex
from function_run.core.registry_index.parsing import parse_registry_index

logger = logging.getLogger(__name__)

DEFAULT_INDEX_HOST = "https://raw.githubusercontent.com"
INDEX_PATH_PREFIX = "buildpacks/registry-index/main"


class RealRegistryIndex(RegistryIndex):
    """Fetches index files over HTTP(S) with a single GET per buildpack."""

    def __init__(
        self,
        *,
        host: str = DEFAULT_INDEX_HOST,
        timeout: float | None = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._host = host.rstrip("/")
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()

    def index_url(self, buildpack: Buildpack) -> str:
        """Full URL of the index file for a buildpack."""
        return f"{self._host}/{INDEX_PATH_PREFIX}/{buildpack.index_path()}"

    def fetch_entries(self, buildpack: Buildpack) -> list[RegistryEntry]:
        url = self.index_url(buildpack)
        logger.debug("Fetching registry index: url=%s", url)
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RegistryIndexError(
                f"Failed to fetch registry index for {buildpack.namespace}/{buildpack.name} "
                f"from {url}: {e}"
            ) from e

        response.encoding = "utf-8"
        entries = parse_registry_index(response.text, source=url)
        logger.debug("Registry index parsed: buildpack=%s, entries=%d", buildpack, len(entries))
        return entries
