"""Error taxonomy and process exit codes.

Every failure that aborts a run is a FunctionRunError subclass carrying the
exit code the CLI terminates with. Detect/build failures are not exceptions:
they are terminal lifecycle states (see function_run.core.lifecycle), but they
share the same exit code table so calling scripts see one documented contract.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Documented process exit codes."""

    SUCCESS = 0
    INTERNAL_ERROR = 1
    NO_HOME_DIR = 100
    PARSE_ERROR = 110
    NO_VERSION_FOUND = 111
    FETCH_ERROR = 120
    UNPACK_ERROR = 130
    FILESYSTEM_ERROR = 131
    DETECT_FAILED = 200
    BUILD_FAILED = 201
    LAUNCH_FAILED = 202


class FunctionRunError(Exception):
    """Base class for all errors that abort a run."""

    exit_code: ExitCode = ExitCode.INTERNAL_ERROR


class ParseError(FunctionRunError):
    """Malformed input that can never succeed on retry."""

    exit_code = ExitCode.PARSE_ERROR


class InvalidAddressError(ParseError):
    """Registry entry address is not of the form host/image@reference."""

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"Address is formatted improperly: {address!r} ({reason})")


class ConfigError(ParseError):
    """config.toml exists but holds an invalid value."""


class NoVersionFoundError(FunctionRunError):
    """The requested version is not among the selectable registry entries."""

    exit_code = ExitCode.NO_VERSION_FOUND

    def __init__(self, buildpack: str, version: str, *, yanked: bool = False) -> None:
        self.buildpack = buildpack
        self.version = version
        self.yanked = yanked
        message = f"No version found: {buildpack} {version}"
        if yanked:
            message += " (the version is yanked; pass --allow-yanked to use it anyway)"
        super().__init__(message)


class FetchError(FunctionRunError):
    """Network or registry failure."""

    exit_code = ExitCode.FETCH_ERROR


class RegistryIndexError(FetchError):
    """Registry index could not be fetched or decoded."""


class AuthenticationError(FetchError):
    """Anonymous pull token could not be obtained from the image registry."""


class ManifestNotFoundError(FetchError):
    """Image manifest could not be retrieved for the given reference."""


class BlobFetchError(FetchError):
    """A layer blob could not be downloaded or failed verification."""


class UnpackError(FunctionRunError):
    """A layer archive is malformed or contains an unsafe entry."""

    exit_code = ExitCode.UNPACK_ERROR


class FilesystemError(FunctionRunError):
    """Unexpected missing or existing path, or permission failure."""

    exit_code = ExitCode.FILESYSTEM_ERROR


class LaunchDescriptorError(FunctionRunError):
    """launch.toml is missing or malformed after a successful build."""

    exit_code = ExitCode.LAUNCH_FAILED
