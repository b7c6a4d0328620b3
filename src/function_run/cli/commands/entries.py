import click
from rich.console import Console
from rich.table import Table

from function_run.cli.commands.shared import buildpack_argument
from function_run.cli.error_boundary import cli_error_boundary
from function_run.cli.json_output import emit_json, json_error_boundary
from function_run.cli.output import user_output
from function_run.core.buildpack import Buildpack
from function_run.core.context import FunctionRunContext


@click.command("entries")
@buildpack_argument
@click.option("--show-yanked", is_flag=True, help="Include yanked versions.")
@click.option(
    "--format",
    "format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_obj
@cli_error_boundary
@json_error_boundary
def entries_cmd(
    ctx: FunctionRunContext,
    buildpack: Buildpack,
    show_yanked: bool,
    format: str,
) -> None:
    """List the published versions of BUILDPACK."""
    entries = ctx.registry_index.fetch_entries(buildpack)
    if not show_yanked:
        entries = [entry for entry in entries if not entry.yanked]

    if format == "json":
        emit_json(
            {
                "buildpack": f"{buildpack.namespace}/{buildpack.name}",
                "index_path": buildpack.index_path(),
                "entries": [entry.model_dump(mode="json") for entry in entries],
            }
        )
        return

    if not entries:
        user_output(f"No entries found for {buildpack.namespace}/{buildpack.name}.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("version", style="cyan", no_wrap=True)
    if show_yanked:
        table.add_column("yanked", no_wrap=True)
    table.add_column("address", no_wrap=True)

    for entry in entries:
        if show_yanked:
            yanked = "[red]yes[/red]" if entry.yanked else "no"
            table.add_row(str(entry.version), yanked, entry.address)
        else:
            table.add_row(str(entry.version), entry.address)

    console = Console(stderr=True, width=200)
    console.print(table)
