"""Options and arguments shared by buildpack commands."""

import click
import semver

from function_run.core.buildpack import Buildpack

DEFAULT_BUILDPACK = "heroku/jvm-function-invoker"
DEFAULT_VERSION = "0.5.2"


def _parse_buildpack(ctx: click.Context, param: click.Parameter, value: str) -> Buildpack:
    try:
        return Buildpack.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _parse_version(ctx: click.Context, param: click.Parameter, value: str) -> semver.Version:
    try:
        return semver.Version.parse(value)
    except ValueError as e:
        raise click.BadParameter(f"{value!r} is not a semantic version") from e


buildpack_argument = click.argument(
    "buildpack",
    required=False,
    default=DEFAULT_BUILDPACK,
    callback=_parse_buildpack,
)

version_option = click.option(
    "--version",
    "version",
    default=DEFAULT_VERSION,
    show_default=True,
    callback=_parse_version,
    help="Exact buildpack version to use.",
)

allow_yanked_option = click.option(
    "--allow-yanked",
    is_flag=True,
    help="Allow selecting a version that has been yanked from the registry.",
)
