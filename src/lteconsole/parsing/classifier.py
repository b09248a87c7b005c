"""Line classifier.

Maps one console line to a semantic tag. There is no look-ahead: a new
table is only discovered through its delimiter line, and whether a line
counts as data depends on which kind is currently active.
"""

from __future__ import annotations

from dataclasses import dataclass

from lteconsole.core.models.base import LineTag
from lteconsole.parsing.registry import TableKind, TableRegistry


@dataclass(frozen=True)
class Classification:
    """Tag for one line, with the table kind for delimiter/header/data lines."""

    tag: LineTag
    kind: TableKind | None = None
    text: str = ""


BLANK = Classification(LineTag.BLANK)


def classify(
    line: str,
    registry: TableRegistry,
    active_kind: TableKind | None = None,
) -> Classification:
    """Classify a raw console line.

    Args:
        line: Raw line, surrounding whitespace is ignored
        registry: Known table kinds and noise patterns
        active_kind: Kind of the table currently being read, if any

    Returns:
        Classification; anything unrecognized is NOISE
    """
    text = line.strip()
    if not text:
        return BLANK

    if registry.is_noise(text):
        return Classification(LineTag.NOISE, text=text)

    kind = registry.kind_for_delimiter(text)
    if kind is not None:
        return Classification(LineTag.DELIMITER, kind, text)

    if active_kind is not None and active_kind.is_header(text):
        return Classification(LineTag.HEADER, active_kind, text)
    for candidate in registry:
        if candidate is not active_kind and candidate.is_header(text):
            return Classification(LineTag.HEADER, candidate, text)

    if active_kind is not None and active_kind.is_data(text):
        return Classification(LineTag.DATA, active_kind, text)

    return Classification(LineTag.NOISE, text=text)
