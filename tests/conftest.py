"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest

from lteconsole.parsing.registry import (
    TableKindConfig,
    TableKindsFile,
    TableRegistry,
    load_table_registry,
)
from lteconsole.routing.router import SinkRouter
from lteconsole.sinks.memory import MemorySinkBackend

CONFIG_FILE = Path(__file__).parent.parent / "config" / "table_kinds.yaml"

# Short delimiters keep scenario tests readable
UE_DELIMITER = "----DL--- ----UL---"
CPU_DELIMITER = "----CPU----"

UE_HEADER = "UE_ID RRC DL UL"
CPU_HEADER = "TOTAL RX TX"


@pytest.fixture
def registry() -> TableRegistry:
    """Registry loaded from the project's config/table_kinds.yaml."""
    return load_table_registry(CONFIG_FILE)


@pytest.fixture
def scenario_registry() -> TableRegistry:
    """Small registry with a UE kind and a CPU kind using short delimiters."""
    return TableRegistry.from_config(
        TableKindsFile(
            table_kinds=[
                TableKindConfig(name="ue", delimiter=UE_DELIMITER, header_token="UE_ID"),
                TableKindConfig(
                    name="cpu",
                    delimiter=CPU_DELIMITER,
                    header_token="TOTAL",
                    data_pattern=r"^\d+(\.\d+)?%",
                ),
            ],
        )
    )


@pytest.fixture
def memory_backend() -> MemorySinkBackend:
    return MemorySinkBackend()


@pytest.fixture
def router(memory_backend: MemorySinkBackend) -> SinkRouter:
    return SinkRouter(memory_backend)
