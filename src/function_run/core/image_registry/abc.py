"""Image registry interface.

Capability interface over the registry distribution protocol: authenticate,
get a manifest, get a blob. The real implementation speaks HTTP; tests inject
a fake so the fetch pipeline runs without network access.
"""

from abc import ABC, abstractmethod

from function_run.core.image_registry.manifest import Manifest


class ImageRegistry(ABC):
    """Abstract interface for pulling image content from a registry."""

    @abstractmethod
    def authenticate(self, host: str, scopes: list[str]) -> None:
        """Obtain anonymous pull access to a registry host.

        Args:
            host: Registry host (e.g. "public.ecr.aws")
            scopes: Token scopes, e.g. ["repository:heroku/foo:pull"]

        Raises:
            AuthenticationError: If the registry refuses anonymous access
        """
        ...

    @abstractmethod
    def get_manifest(self, host: str, image: str, reference: str) -> Manifest:
        """Retrieve the manifest for an image at a tag or digest.

        Multi-platform indexes are resolved to a single-platform manifest.

        Raises:
            ManifestNotFoundError: If the manifest cannot be retrieved or parsed
        """
        ...

    @abstractmethod
    def get_blob(self, host: str, image: str, digest: str) -> bytes:
        """Download a blob by digest.

        Must be safe to call concurrently from several threads.

        Raises:
            BlobFetchError: If the download fails or the content does not match
                the digest
        """
        ...
