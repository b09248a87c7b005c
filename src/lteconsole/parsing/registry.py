"""Table kind registry.

A table kind is registered as a (delimiter, header predicate, data predicate)
triple. Kinds and noise patterns are normally loaded from
config/table_kinds.yaml, but can also be registered in code with arbitrary
predicates.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from lteconsole.core.exceptions import ConfigurationError
from lteconsole.core.logging import get_logger

logger = get_logger(__name__)

LinePredicate = Callable[[str], bool]

# Delimiter printed by the eNB shell above every UE metrics table.
UE_TABLE_DELIMITER = (
    "----DL----------------------- ----UL----------------------------------------------------"
)


def leading_token_predicate(token: str) -> LinePredicate:
    """Predicate matching lines whose first whitespace-separated token is *token*."""

    def _matches(line: str) -> bool:
        parts = line.split(maxsplit=1)
        return bool(parts) and parts[0] == token

    return _matches


def pattern_predicate(pattern: str) -> LinePredicate:
    """Predicate matching lines that start with the regex *pattern*."""
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e

    def _matches(line: str) -> bool:
        return compiled.match(line) is not None

    return _matches


@dataclass(frozen=True)
class TableKind:
    """A family of tables sharing one delimiter and one schema shape."""

    name: str
    delimiter: str
    is_header: LinePredicate = field(compare=False)
    is_data: LinePredicate = field(compare=False)
    sink_name: str | None = None
    description: str = ""


class TableKindConfig(BaseModel):
    """One table kind entry of table_kinds.yaml."""

    name: str
    delimiter: str
    header_token: str
    data_pattern: str = r"^\d+\s"
    sink: str | None = None
    description: str = ""

    def to_kind(self) -> TableKind:
        return TableKind(
            name=self.name,
            delimiter=self.delimiter.strip(),
            is_header=leading_token_predicate(self.header_token),
            is_data=pattern_predicate(self.data_pattern),
            sink_name=self.sink,
            description=self.description,
        )


class NoisePatternConfig(BaseModel):
    """One noise pattern entry; suppress is the only recognized action."""

    pattern: str
    action: Literal["suppress"] = "suppress"


class TableKindsFile(BaseModel):
    """Top-level layout of table_kinds.yaml."""

    table_kinds: list[TableKindConfig] = Field(default_factory=list)
    noise_patterns: list[NoisePatternConfig] = Field(default_factory=list)


class TableRegistry:
    """Registered table kinds plus the noise patterns that are always dropped."""

    def __init__(self) -> None:
        self._by_delimiter: dict[str, TableKind] = {}
        self._by_name: dict[str, TableKind] = {}
        self._noise: list[re.Pattern[str]] = []

    def register(self, kind: TableKind) -> None:
        """Register a table kind.

        Raises:
            ConfigurationError: if the name or delimiter is already taken
        """
        if not kind.delimiter:
            raise ConfigurationError(f"Table kind {kind.name!r} has an empty delimiter")
        if kind.name in self._by_name:
            raise ConfigurationError(f"Duplicate table kind name: {kind.name!r}")
        existing = self._by_delimiter.get(kind.delimiter)
        if existing is not None:
            raise ConfigurationError(
                f"Delimiter of {kind.name!r} is already used by {existing.name!r}"
            )
        self._by_delimiter[kind.delimiter] = kind
        self._by_name[kind.name] = kind

    def add_noise_pattern(self, pattern: str) -> None:
        try:
            self._noise.append(re.compile(pattern))
        except re.error as e:
            raise ConfigurationError(f"Invalid noise pattern {pattern!r}: {e}") from e

    def kind_for_delimiter(self, line: str) -> TableKind | None:
        return self._by_delimiter.get(line)

    def get(self, name: str) -> TableKind | None:
        return self._by_name.get(name)

    def is_noise(self, line: str) -> bool:
        return any(p.search(line) for p in self._noise)

    @property
    def noise_patterns(self) -> list[str]:
        return [p.pattern for p in self._noise]

    def __iter__(self) -> Iterator[TableKind]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    @classmethod
    def from_config(cls, config: TableKindsFile) -> TableRegistry:
        registry = cls()
        for kind_config in config.table_kinds:
            registry.register(kind_config.to_kind())
        for noise in config.noise_patterns:
            registry.add_noise_pattern(noise.pattern)
        return registry


# Used when no table_kinds.yaml can be found: the UE metrics table and the
# shell noise seen in captures from the eNB console.
DEFAULT_TABLE_KINDS = TableKindsFile(
    table_kinds=[
        TableKindConfig(
            name="ue",
            delimiter=UE_TABLE_DELIMITER,
            header_token="UE_ID",
            data_pattern=r"^\d+\s",
            sink="lte_metrics.csv",
            description="Per-UE downlink/uplink metrics",
        ),
    ],
    noise_patterns=[
        NoisePatternConfig(pattern=r"^PRACH"),
        NoisePatternConfig(pattern=r"^\(enb\)"),
        NoisePatternConfig(pattern=r"Unknown command"),
        NoisePatternConfig(pattern=r"^\[ \S+:root"),
        NoisePatternConfig(pattern=r"(?i)press return"),
    ],
)


def load_table_registry(config_path: Path | None = None) -> TableRegistry:
    """Load the table kind registry from YAML.

    Args:
        config_path: Path to table_kinds.yaml. If None, uses the file from settings.
            A missing file falls back to the built-in UE metrics kind.

    Returns:
        TableRegistry instance

    Raises:
        ConfigurationError: if the file is malformed
    """
    if config_path is None:
        from lteconsole.core.config import get_settings

        config_path = get_settings().table_kinds_path

    if not config_path.exists():
        logger.debug("table_kinds_config_not_found", path=str(config_path))
        return TableRegistry.from_config(DEFAULT_TABLE_KINDS)

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        config = TableKindsFile.model_validate(raw)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(f"Invalid table kinds file {config_path}: {e}") from e

    registry = TableRegistry.from_config(config)
    logger.info("table_kinds_loaded", path=str(config_path), kinds=len(registry))
    return registry
