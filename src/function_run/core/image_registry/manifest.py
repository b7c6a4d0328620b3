"""Image manifest parsing.

Handles the manifest formats a buildpack image is published with: Docker
image manifest v2 schema 2, OCI image manifest, their multi-platform
counterparts (Docker manifest list, OCI image index), and the legacy
schema 1 layout whose ``fsLayers`` are listed top layer first.
"""

from dataclasses import dataclass
from typing import Any

DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"
DOCKER_MANIFEST_V1_SIGNED = "application/vnd.docker.distribution.manifest.v1+prettyjws"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_INDEX = "application/vnd.oci.image.index.v1+json"

ACCEPTED_MEDIA_TYPES = (
    OCI_MANIFEST,
    DOCKER_MANIFEST_V2,
    OCI_INDEX,
    DOCKER_MANIFEST_LIST,
    DOCKER_MANIFEST_V1_SIGNED,
)

INDEX_MEDIA_TYPES = frozenset({DOCKER_MANIFEST_LIST, OCI_INDEX})

DEFAULT_PLATFORM = ("linux", "amd64")


@dataclass(frozen=True)
class Manifest:
    """Image manifest reduced to what unpacking needs.

    Attributes:
        media_type: Manifest media type as reported by the registry
        layer_digests: Layer blob digests, base layer first
    """

    media_type: str
    layer_digests: tuple[str, ...]


def is_index(data: dict[str, Any], media_type: str | None) -> bool:
    """Whether a manifest document is a multi-platform index."""
    if media_type in INDEX_MEDIA_TYPES or data.get("mediaType") in INDEX_MEDIA_TYPES:
        return True
    return "manifests" in data and "layers" not in data


def select_platform_digest(
    data: dict[str, Any], platform: tuple[str, str] = DEFAULT_PLATFORM
) -> str:
    """Pick the manifest digest for a platform from a manifest list or index.

    Falls back to the first listed manifest when no entry matches.

    Raises:
        ValueError: If the index lists no manifests
    """
    manifests = data.get("manifests") or []
    if not manifests:
        raise ValueError("Image index lists no manifests")

    wanted_os, wanted_arch = platform
    for candidate in manifests:
        candidate_platform = candidate.get("platform") or {}
        if (
            candidate_platform.get("os") == wanted_os
            and candidate_platform.get("architecture") == wanted_arch
        ):
            return str(candidate["digest"])
    return str(manifests[0]["digest"])


def parse_manifest(data: dict[str, Any], media_type: str | None) -> Manifest:
    """Extract layer digests from a single-platform manifest document.

    Raises:
        ValueError: If the document has neither ``layers`` nor ``fsLayers``
    """
    resolved_type = media_type or str(data.get("mediaType", ""))

    if "layers" in data:
        digests = tuple(str(layer["digest"]) for layer in data["layers"])
        return Manifest(media_type=resolved_type, layer_digests=digests)

    if "fsLayers" in data:
        digests = tuple(str(layer["blobSum"]) for layer in reversed(data["fsLayers"]))
        return Manifest(media_type=resolved_type, layer_digests=digests)

    raise ValueError("Manifest lists no layers")
