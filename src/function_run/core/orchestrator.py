"""End-to-end pipeline: resolve, materialize, run the lifecycle.

Materialization follows a trust-on-presence rule: the first successful
download owns its directory, and later runs reuse it without re-checking
its contents or touching the network.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import semver

from function_run.core.buildpack import Buildpack, RegistryEntry
from function_run.core.context import FunctionRunContext
from function_run.core.errors import NoVersionFoundError
from function_run.core.image_fetcher import fetch_and_unpack
from function_run.core.lifecycle import LifecycleOutcome, LifecycleRunner, PhaseEnvironment
from function_run.core.reference import decode_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializedBuildpack:
    """A buildpack version unpacked on disk.

    Attributes:
        buildpack: Buildpack identifier
        version: Materialized version
        download_root: Directory the image layers were unpacked into
        buildpack_dir: Buildpack root inside download_root (bin/detect, bin/build)
        reused: True if an existing download was reused without fetching
    """

    buildpack: Buildpack
    version: semver.Version
    download_root: Path
    buildpack_dir: Path
    reused: bool


def select_entry(
    entries: list[RegistryEntry],
    buildpack: Buildpack,
    version: semver.Version,
    *,
    allow_yanked: bool = False,
) -> RegistryEntry:
    """Find the entry whose version exactly matches.

    Yanked entries are only selectable with allow_yanked.

    Raises:
        NoVersionFoundError: If no selectable entry matches; never falls back
            to another version
    """
    label = f"{buildpack.namespace}/{buildpack.name}"
    for entry in entries:
        if entry.version != version:
            continue
        if entry.yanked and not allow_yanked:
            raise NoVersionFoundError(label, str(version), yanked=True)
        return entry
    raise NoVersionFoundError(label, str(version))


def materialize(
    ctx: FunctionRunContext,
    buildpack: Buildpack,
    version: semver.Version,
    *,
    allow_yanked: bool = False,
) -> MaterializedBuildpack:
    """Ensure a buildpack version is unpacked under the config root.

    If the download directory already exists it is reused as-is and no
    network request is made. Otherwise the registry index is consulted, the
    entry's address decoded, and the image fetched and unpacked.

    Raises:
        NoVersionFoundError, InvalidAddressError, FetchError, UnpackError,
        FilesystemError
    """
    download_root = ctx.layout.download_root(buildpack, version)
    buildpack_dir = ctx.layout.buildpack_dir(buildpack, version)

    if download_root.exists():
        ctx.feedback.info(f"Using existing {buildpack}-{version}")
        return MaterializedBuildpack(
            buildpack=buildpack,
            version=version,
            download_root=download_root,
            buildpack_dir=buildpack_dir,
            reused=True,
        )

    entries = ctx.registry_index.fetch_entries(buildpack)
    entry = select_entry(entries, buildpack, version, allow_yanked=allow_yanked)
    ref = decode_address(entry.address)
    logger.debug("Selected entry: buildpack=%s, version=%s, address=%s", buildpack, version, ref)

    fetch_and_unpack(ctx.image_registry, ref, download_root, progress=ctx.feedback.info)
    return MaterializedBuildpack(
        buildpack=buildpack,
        version=version,
        download_root=download_root,
        buildpack_dir=buildpack_dir,
        reused=False,
    )


def run_buildpack(
    ctx: FunctionRunContext,
    buildpack: Buildpack,
    version: semver.Version,
    *,
    allow_yanked: bool = False,
) -> LifecycleOutcome:
    """Prepare the layout, materialize the buildpack and run its lifecycle.

    Returns:
        LifecycleOutcome whose exit_code is the program's exit status

    Raises:
        FunctionRunError: For any failure before the lifecycle starts
    """
    ctx.layout.prepare()
    materialized = materialize(ctx, buildpack, version, allow_yanked=allow_yanked)

    environment = PhaseEnvironment(
        buildpack_dir=materialized.buildpack_dir,
        home_dir=ctx.layout.home_dir,
        platform_dir=ctx.layout.platform_dir,
        layers_dir=ctx.layout.layers_dir,
        plan=ctx.layout.plan,
        stack_id=ctx.config.stack_id,
    )
    runner = LifecycleRunner(
        ctx.process_runner,
        environment,
        ctx.feedback,
        detect_timeout=ctx.config.detect_timeout,
        build_timeout=ctx.config.build_timeout,
    )
    return runner.run()
