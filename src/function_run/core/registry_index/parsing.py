"""Parsing of registry index files (one JSON object per line)."""

from pydantic import ValidationError

from function_run.core.buildpack import RegistryEntry
from function_run.core.errors import RegistryIndexError


def parse_registry_index(text: str, *, source: str) -> list[RegistryEntry]:
    """Parse newline-delimited JSON registry entries.

    Blank lines are skipped; any other line that fails to decode fails the
    whole parse.

    Args:
        text: Body of an index file
        source: Where the text came from, for error messages

    Returns:
        Entries in line order

    Raises:
        RegistryIndexError: If a non-blank line is not a valid entry
    """
    entries: list[RegistryEntry] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            entries.append(RegistryEntry.model_validate_json(line))
        except ValidationError as e:
            raise RegistryIndexError(
                f"Invalid registry entry at {source} line {line_number}: {e}"
            ) from e
    return entries
