"""Fake implementation of ImageRegistry for testing.

Serves manifests and blobs from memory so the fetch pipeline can be tested
without network access.
"""

import threading

from function_run.core.errors import AuthenticationError, BlobFetchError, ManifestNotFoundError
from function_run.core.image_registry.abc import ImageRegistry
from function_run.core.image_registry.manifest import OCI_MANIFEST, Manifest


class FakeImageRegistry(ImageRegistry):
    """In-memory fake image registry.

    Constructor Injection:
    - manifests: {(image, reference): [layer digests]}
    - blobs: {digest: content}
    - failing_blobs: digests whose fetch raises BlobFetchError
    - auth_fails: make authenticate() raise AuthenticationError

    All calls are recorded (thread-safe) for test assertions.
    """

    def __init__(
        self,
        *,
        manifests: dict[tuple[str, str], list[str]] | None = None,
        blobs: dict[str, bytes] | None = None,
        failing_blobs: set[str] | None = None,
        auth_fails: bool = False,
    ) -> None:
        self._manifests = manifests or {}
        self._blobs = blobs or {}
        self._failing_blobs = failing_blobs or set()
        self._auth_fails = auth_fails
        self._lock = threading.Lock()
        self._auth_calls: list[tuple[str, list[str]]] = []
        self._manifest_calls: list[tuple[str, str, str]] = []
        self._blob_calls: list[tuple[str, str, str]] = []

    def authenticate(self, host: str, scopes: list[str]) -> None:
        with self._lock:
            self._auth_calls.append((host, list(scopes)))
        if self._auth_fails:
            raise AuthenticationError(f"Registry {host} refused anonymous access")

    def get_manifest(self, host: str, image: str, reference: str) -> Manifest:
        with self._lock:
            self._manifest_calls.append((host, image, reference))
        key = (image, reference)
        if key not in self._manifests:
            raise ManifestNotFoundError(f"Manifest not found: {host}/{image}@{reference}")
        return Manifest(media_type=OCI_MANIFEST, layer_digests=tuple(self._manifests[key]))

    def get_blob(self, host: str, image: str, digest: str) -> bytes:
        with self._lock:
            self._blob_calls.append((host, image, digest))
        if digest in self._failing_blobs or digest not in self._blobs:
            raise BlobFetchError(f"Failed to fetch blob {digest} of {host}/{image}")
        return self._blobs[digest]

    @property
    def auth_calls(self) -> list[tuple[str, list[str]]]:
        with self._lock:
            return self._auth_calls.copy()

    @property
    def manifest_calls(self) -> list[tuple[str, str, str]]:
        with self._lock:
            return self._manifest_calls.copy()

    @property
    def blob_calls(self) -> list[tuple[str, str, str]]:
        with self._lock:
            return self._blob_calls.copy()

    @property
    def call_count(self) -> int:
        """Total number of registry calls of any kind."""
        with self._lock:
            return len(self._auth_calls) + len(self._manifest_calls) + len(self._blob_calls)
