"""Image address decoding.

Registry entries carry an opaque address of the form ``host/image@reference``
where ``image`` may itself contain slashes and ``reference`` is a tag or a
content digest. Host syntax is not validated here; the registry client rejects
hosts it cannot reach.
"""

from dataclasses import dataclass

from function_run.core.errors import InvalidAddressError


@dataclass(frozen=True)
class ImageReference:
    """Decoded image address."""

    host: str
    image: str
    reference: str

    def __str__(self) -> str:
        return f"{self.host}/{self.image}@{self.reference}"


def decode_address(address: str) -> ImageReference:
    """Decode ``host/image@reference`` into an ImageReference.

    Args:
        address: Address string from a registry entry

    Returns:
        ImageReference with host, image and reference split out verbatim

    Raises:
        InvalidAddressError: If the address has no ``@``, an empty reference,
            no ``/`` before the ``@``, or an empty host or image
    """
    locator, sep, reference = address.partition("@")
    if not sep:
        raise InvalidAddressError(address, "missing '@' separator")
    if not reference:
        raise InvalidAddressError(address, "empty reference")

    host, sep, image = locator.partition("/")
    if not sep:
        raise InvalidAddressError(address, "missing '/' between host and image")
    if not host:
        raise InvalidAddressError(address, "empty host")
    if not image:
        raise InvalidAddressError(address, "empty image")

    return ImageReference(host=host, image=image, reference=reference)
