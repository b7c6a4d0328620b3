"""On-disk layout under the config root.

    <config_root>/
        home/                HOME for buildpack executables
        platform/            CNB platform directory
        layers/              layers directory written by bin/build
        tmp/
        plan.toml            empty placeholder
        build_plan.toml      empty placeholder
        buildpacks/<namespace_name>-<version>/   materialized images
"""

from dataclasses import dataclass
from pathlib import Path

import semver

from function_run.core.buildpack import Buildpack
from function_run.core.errors import FilesystemError


@dataclass(frozen=True)
class ConfigLayout:
    """Paths derived from the config root."""

    root: Path

    @property
    def home_dir(self) -> Path:
        return self.root / "home"

    @property
    def platform_dir(self) -> Path:
        return self.root / "platform"

    @property
    def layers_dir(self) -> Path:
        return self.root / "layers"

    @property
    def tmp_dir(self) -> Path:
        return self.root / "tmp"

    @property
    def plan(self) -> Path:
        return self.root / "plan.toml"

    @property
    def build_plan(self) -> Path:
        return self.root / "build_plan.toml"

    @property
    def buildpacks_dir(self) -> Path:
        return self.root / "buildpacks"

    def download_root(self, buildpack: Buildpack, version: semver.Version) -> Path:
        """Directory a buildpack image version is unpacked into."""
        return self.buildpacks_dir / f"{buildpack}-{version}"

    def buildpack_dir(self, buildpack: Buildpack, version: semver.Version) -> Path:
        """Buildpack root (holding bin/detect and bin/build) inside the image."""
        return (
            self.download_root(buildpack, version)
            / "cnb"
            / "buildpacks"
            / str(buildpack)
            / str(version)
        )

    def prepare(self) -> None:
        """Create the directories and touch the placeholder files.

        Raises:
            FilesystemError: If any path cannot be created
        """
        try:
            for directory in (
                self.home_dir,
                self.platform_dir,
                self.layers_dir,
                self.tmp_dir,
                self.buildpacks_dir,
            ):
                directory.mkdir(parents=True, exist_ok=True)
            for placeholder in (self.plan, self.build_plan):
                placeholder.touch(exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot prepare config directory {self.root}: {e}") from e
