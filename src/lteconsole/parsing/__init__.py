"""Console table parsing: registry, classifier, row parser, assembler."""

from lteconsole.parsing.assembler import AssemblerStats, RowRouter, TableAssembler
from lteconsole.parsing.classifier import Classification, classify
from lteconsole.parsing.registry import (
    DEFAULT_TABLE_KINDS,
    UE_TABLE_DELIMITER,
    NoisePatternConfig,
    TableKind,
    TableKindConfig,
    TableKindsFile,
    TableRegistry,
    leading_token_predicate,
    load_table_registry,
    pattern_predicate,
)
from lteconsole.parsing.rows import FILLER, STOPPED_MARKER, parse_header, parse_row

__all__ = [
    "AssemblerStats",
    "Classification",
    "DEFAULT_TABLE_KINDS",
    "FILLER",
    "NoisePatternConfig",
    "RowRouter",
    "STOPPED_MARKER",
    "TableAssembler",
    "TableKind",
    "TableKindConfig",
    "TableKindsFile",
    "TableRegistry",
    "UE_TABLE_DELIMITER",
    "classify",
    "leading_token_predicate",
    "load_table_registry",
    "parse_header",
    "parse_row",
    "pattern_predicate",
]
