"""Image registry client speaking the Docker Registry HTTP API v2.

Only anonymous pulls are supported: the token endpoint advertised by the
registry's ``WWW-Authenticate: Bearer`` challenge is queried without
credentials.
"""

import hashlib
import logging
import re
import threading
from typing import Any

import requests

from function_run.core.errors import AuthenticationError, BlobFetchError, ManifestNotFoundError
from function_run.core.image_registry.abc import ImageRegistry
from function_run.core.image_registry.manifest import (
    ACCEPTED_MEDIA_TYPES,
    Manifest,
    is_index,
    parse_manifest,
    select_platform_digest,
)

logger = logging.getLogger(__name__)

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def parse_bearer_challenge(header: str) -> dict[str, str] | None:
    """Parse a ``WWW-Authenticate: Bearer ...`` header into its parameters.

    Returns:
        Mapping of challenge parameters (realm, service, scope), or None if
        the challenge is not a Bearer challenge
    """
    scheme, _, params = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return dict(_CHALLENGE_PARAM.findall(params))


class RealImageRegistry(ImageRegistry):
    """Pulls manifests and blobs over HTTP(S) with anonymous bearer tokens."""

    def __init__(
        self,
        *,
        timeout: float | None = 30.0,
        session: requests.Session | None = None,
        insecure: bool = False,
    ) -> None:
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._scheme = "http" if insecure else "https"
        self._tokens: dict[str, str | None] = {}
        self._lock = threading.Lock()

    def _base_url(self, host: str) -> str:
        return f"{self._scheme}://{host}/v2"

    def _headers(self, host: str, accept: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        with self._lock:
            token = self._tokens.get(host)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if accept:
            headers["Accept"] = accept
        return headers

    def authenticate(self, host: str, scopes: list[str]) -> None:
        url = f"{self._base_url(host)}/"
        logger.debug("Probing registry: url=%s", url)
        try:
            probe = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise AuthenticationError(f"Failed to reach registry {host}: {e}") from e

        if probe.status_code == 200:
            logger.debug("Registry allows unauthenticated access: host=%s", host)
            with self._lock:
                self._tokens[host] = None
            return

        if probe.status_code != 401:
            raise AuthenticationError(
                f"Unexpected status {probe.status_code} from registry {host} at {url}"
            )

        challenge = parse_bearer_challenge(probe.headers.get("WWW-Authenticate", ""))
        if challenge is None or "realm" not in challenge:
            raise AuthenticationError(
                f"Registry {host} does not offer anonymous bearer token authentication"
            )

        params: list[tuple[str, str]] = []
        if "service" in challenge:
            params.append(("service", challenge["service"]))
        params.extend(("scope", scope) for scope in scopes)

        logger.debug("Requesting pull token: realm=%s, scopes=%s", challenge["realm"], scopes)
        try:
            response = self._session.get(challenge["realm"], params=params, timeout=self._timeout)
            response.raise_for_status()
            payload: Any = response.json()
        except requests.RequestException as e:
            raise AuthenticationError(f"Failed to obtain pull token for {host}: {e}") from e
        except ValueError as e:
            raise AuthenticationError(f"Token endpoint for {host} returned invalid JSON") from e

        token = None
        if isinstance(payload, dict):
            token = payload.get("token") or payload.get("access_token")
        if not token:
            raise AuthenticationError(f"Token endpoint for {host} returned no token")

        with self._lock:
            self._tokens[host] = str(token)

    def get_manifest(self, host: str, image: str, reference: str) -> Manifest:
        data, media_type = self._fetch_manifest_document(host, image, reference)

        if is_index(data, media_type):
            try:
                digest = select_platform_digest(data)
            except (KeyError, ValueError) as e:
                raise ManifestNotFoundError(
                    f"Invalid image index for {host}/{image}@{reference}: {e}"
                ) from e
            logger.debug("Resolved image index: image=%s, digest=%s", image, digest)
            data, media_type = self._fetch_manifest_document(host, image, digest)

        try:
            return parse_manifest(data, media_type)
        except (KeyError, TypeError, ValueError) as e:
            raise ManifestNotFoundError(
                f"Invalid manifest for {host}/{image}@{reference}: {e}"
            ) from e

    def _fetch_manifest_document(
        self, host: str, image: str, reference: str
    ) -> tuple[dict[str, Any], str | None]:
        url = f"{self._base_url(host)}/{image}/manifests/{reference}"
        headers = self._headers(host, accept=", ".join(ACCEPTED_MEDIA_TYPES))
        logger.debug("Fetching manifest: url=%s", url)
        try:
            response = self._session.get(url, headers=headers, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ManifestNotFoundError(
                f"Failed to fetch manifest for {host}/{image}@{reference}: {e}"
            ) from e
        except ValueError as e:
            raise ManifestNotFoundError(
                f"Manifest for {host}/{image}@{reference} is not valid JSON"
            ) from e

        if not isinstance(data, dict):
            raise ManifestNotFoundError(f"Manifest for {host}/{image}@{reference} is not an object")

        content_type = response.headers.get("Content-Type")
        media_type = content_type.split(";")[0].strip() if content_type else None
        return data, media_type

    def get_blob(self, host: str, image: str, digest: str) -> bytes:
        url = f"{self._base_url(host)}/{image}/blobs/{digest}"
        logger.debug("Fetching blob: url=%s", url)
        try:
            response = self._session.get(url, headers=self._headers(host), timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise BlobFetchError(f"Failed to fetch blob {digest} of {host}/{image}: {e}") from e

        content = response.content
        algorithm, _, expected = digest.partition(":")
        if algorithm == "sha256":
            actual = hashlib.sha256(content).hexdigest()
            if actual != expected:
                raise BlobFetchError(
                    f"Blob {digest} of {host}/{image} failed verification (got sha256:{actual})"
                )
        return content
