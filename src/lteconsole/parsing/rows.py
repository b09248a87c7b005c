"""Header and data row parsing for whitespace-aligned console tables."""

from __future__ import annotations

from lteconsole.core.models.base import Row, Schema

STOPPED_MARKER = "[stopped]"
FILLER = "-"


def tokenize(line: str) -> list[str]:
    return line.split()


def parse_header(line: str) -> Schema:
    """Turn a header line into a schema. Duplicate column names are kept."""
    return tuple(tokenize(line))


def parse_row(line: str, schema: Schema) -> Row | None:
    """Parse a data line against *schema*.

    Short rows are padded with "-". A stopped entity ("7 [stopped]") keeps its
    id and the marker and gets filler for every other column.

    Returns:
        A row with exactly len(schema) fields, or None when the line has more
        tokens than the schema has columns. Extra tokens are never truncated.
    """
    width = len(schema)
    tokens = tokenize(line)

    if len(tokens) > 1 and tokens[1] == STOPPED_MARKER:
        if width < 2:
            return None
        return [tokens[0], STOPPED_MARKER] + [FILLER] * (width - 2)

    if len(tokens) > width:
        return None
    return tokens + [FILLER] * (width - len(tokens))
