"""Core module - configuration, logging, errors, and shared models."""

from lteconsole.core.config import Settings, get_settings
from lteconsole.core.exceptions import (
    ConfigurationError,
    LteConsoleError,
    SinkError,
    SourceUnavailableError,
)
from lteconsole.core.models.base import (
    AssemblerPhase,
    LineTag,
    Result,
    RoutingPolicy,
    Row,
    Schema,
    SourceStatus,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ConfigurationError",
    "LteConsoleError",
    "SinkError",
    "SourceUnavailableError",
    # Models - enums
    "AssemblerPhase",
    "LineTag",
    "RoutingPolicy",
    "SourceStatus",
    # Models - data structures
    "Result",
    "Row",
    "Schema",
]
