"""Buildpack identifiers and registry index entries.

Index files follow the Cloud Native Buildpacks registry format: one JSON
object per line, one file per buildpack.
"""

from dataclasses import dataclass

import semver
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


@dataclass(frozen=True)
class Buildpack:
    """Namespaced buildpack identifier (e.g. ``heroku/jvm-function-invoker``)."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}_{self.name}"

    @staticmethod
    def parse(value: str) -> "Buildpack":
        """Parse the ``namespace/name`` form used on the command line.

        Raises:
            ValueError: If the value is not exactly two non-empty segments
        """
        namespace, sep, name = value.partition("/")
        if not sep or not namespace or not name or "/" in name:
            raise ValueError(f"Expected NAMESPACE/NAME, got {value!r}")
        return Buildpack(namespace=namespace, name=name)

    def index_path(self) -> str:
        """Path of this buildpack's file inside the registry index.

        The index fans entries out over directories by name length:
        one- and two-character names live under ``{len}/``, three-character
        names under ``3/{first char}/``, and longer names under
        ``{name[0:2]}/{name[2:4]}/``.
        """
        size = len(self.name)
        if size <= 2:
            return f"{size}/{self}"
        if size == 3:
            return f"{size}/{self.name[0]}/{self}"
        return f"{self.name[0:2]}/{self.name[2:4]}/{self}"


class RegistryEntry(BaseModel):
    """One published version of a buildpack in the registry index."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    namespace: str = Field(alias="ns")
    name: str
    version: semver.Version
    yanked: bool
    address: str = Field(alias="addr")

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: object) -> object:
        if isinstance(value, str):
            return semver.Version.parse(value)
        return value

    @field_serializer("version")
    def _serialize_version(self, version: semver.Version) -> str:
        return str(version)

    @property
    def buildpack(self) -> Buildpack:
        return Buildpack(namespace=self.namespace, name=self.name)
