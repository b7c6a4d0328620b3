"""Layer unpacking into a destination root.

Layers are tar archives (optionally gzip/bzip2/xz compressed) applied in
manifest order, base layer first. Whiteout entries from the OCI layer format
remove content laid down by earlier layers. Extraction uses tarfile's
``data`` filter so absolute paths, ``..`` escapes, links leaving the root and
device files are refused.
"""

import gzip
import io
import logging
import shutil
import tarfile
import zlib
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from function_run.core.errors import FilesystemError, UnpackError

logger = logging.getLogger(__name__)

WHITEOUT_PREFIX = ".wh."
OPAQUE_WHITEOUT = ".wh..wh..opq"


def _resolve_inside(root: Path, relative: PurePosixPath) -> Path:
    target = (root / relative).resolve()
    if not target.is_relative_to(root):
        raise UnpackError(f"Archive entry {relative} resolves outside {root}")
    return target


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _clear_directory(path: Path) -> None:
    if not path.is_dir():
        return
    for child in path.iterdir():
        _remove_path(child)


def _unpack_layer(blob: bytes, root: Path, index: int) -> None:
    with tarfile.open(fileobj=io.BytesIO(blob), mode="r:*") as archive:
        members: list[tarfile.TarInfo] = []
        for member in archive.getmembers():
            name = PurePosixPath(member.name)
            if name.name == OPAQUE_WHITEOUT:
                _clear_directory(_resolve_inside(root, name.parent))
            elif name.name.startswith(WHITEOUT_PREFIX):
                hidden = name.name[len(WHITEOUT_PREFIX) :]
                if hidden in ("", ".", ".."):
                    raise UnpackError(f"Invalid whiteout entry {member.name}")
                # The whited-out entry itself may be a symlink; never follow it
                _remove_path(_resolve_inside(root, name.parent) / hidden)
            else:
                members.append(member)
        logger.debug("Extracting layer %d: entries=%d", index, len(members))
        archive.extractall(root, members=members, filter="data")


def unpack_layers(blobs: Sequence[bytes], destination: Path) -> None:
    """Unpack layer blobs, in order, into an existing destination directory.

    Args:
        blobs: Layer archives, base layer first
        destination: Existing directory to unpack into; resolved to its
            canonical absolute path before anything is written

    Raises:
        UnpackError: If a layer is not a readable archive or holds an unsafe entry
        FilesystemError: If writing under the destination fails
    """
    try:
        root = destination.resolve(strict=True)
    except OSError as e:
        raise FilesystemError(f"Cannot resolve unpack destination {destination}: {e}") from e

    for index, blob in enumerate(blobs):
        try:
            _unpack_layer(blob, root, index)
        except tarfile.FilterError as e:
            raise UnpackError(f"Layer {index} contains an unsafe entry: {e}") from e
        except (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError) as e:
            raise UnpackError(f"Layer {index} is not a valid archive: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Failed to unpack layer {index} into {root}: {e}") from e
