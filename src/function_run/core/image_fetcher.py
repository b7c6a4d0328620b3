"""Download and unpack a buildpack image.

Layers are downloaded concurrently, one worker per digest, and joined
fail-fast: the first failing download cancels every fetch that has not
started yet and aborts the whole operation before the destination is created.
Unpacking only begins once every layer is in memory. Layers are unpacked into
a staging directory next to the destination and renamed into place only after
the last layer succeeds, so a failed run never leaves a partial destination.
"""

import logging
import os
import shutil
import tempfile
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path

from function_run.core.errors import FilesystemError
from function_run.core.image_registry.abc import ImageRegistry
from function_run.core.reference import ImageReference
from function_run.core.unpack import unpack_layers

logger = logging.getLogger(__name__)


def pull_scope(image: str) -> str:
    """Token scope granting pull access to an image repository."""
    return f"repository:{image}:pull"


def fetch_blobs(
    registry: ImageRegistry, ref: ImageReference, digests: tuple[str, ...]
) -> list[bytes]:
    """Fetch every blob concurrently, returning them in digest order.

    Raises:
        FetchError: The first failure raised by any blob fetch. Remaining
            fetches are cancelled (not yet started) or abandoned (in flight).
    """
    if not digests:
        return []

    executor = ThreadPoolExecutor(max_workers=len(digests), thread_name_prefix="blob-fetch")
    try:
        futures: list[Future[bytes]] = [
            executor.submit(registry.get_blob, ref.host, ref.image, digest) for digest in digests
        ]
        done, _pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future not in done:
                continue
            error = future.exception()
            if error is not None:
                logger.debug("Blob fetch failed, cancelling remaining fetches: %s", error)
                raise error
        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def fetch_and_unpack(
    registry: ImageRegistry,
    ref: ImageReference,
    destination: Path,
    *,
    progress: Callable[[str], None] | None = None,
) -> None:
    """Pull an image and unpack its layers into a new directory.

    Args:
        registry: Registry client to pull from
        ref: Decoded image address
        destination: Directory to create; must not exist yet
        progress: Optional callback receiving human-readable progress lines

    Raises:
        AuthenticationError: If anonymous pull access is refused
        ManifestNotFoundError: If the manifest cannot be retrieved
        BlobFetchError: If any layer fails to download
        FilesystemError: If destination exists or cannot be created
        UnpackError: If a layer is malformed or unsafe
    """

    def report(message: str) -> None:
        if progress is not None:
            progress(message)

    registry.authenticate(ref.host, [pull_scope(ref.image)])

    report(f"Fetching manifest for {ref.image}")
    manifest = registry.get_manifest(ref.host, ref.image, ref.reference)
    report(f"{ref.image} -> got {len(manifest.layer_digests)} layer(s)")

    blobs = fetch_blobs(registry, ref, manifest.layer_digests)
    report(f"Downloaded {len(blobs)} layers")

    if destination.exists() or destination.is_symlink():
        raise FilesystemError(f"Destination already exists: {destination}")
    try:
        staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}.", dir=destination.parent))
    except OSError as e:
        raise FilesystemError(f"Cannot create destination {destination}: {e}") from e

    report(f"Unpacking layers to {destination.resolve()}")
    try:
        unpack_layers(blobs, staging)
    except Exception:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    try:
        os.rename(staging, destination)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise FilesystemError(f"Cannot move unpacked layers to {destination}: {e}") from e
    logger.debug("Unpacked image: destination=%s, layers=%d", destination, len(blobs))
