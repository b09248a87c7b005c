"""Base models and types used across all modules."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures.
    Exceptions are reserved for unexpected/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success and self.value is not None:
            return Result.ok(fn(self.value), self.warnings)
        return self


# === Enums ===


class RoutingPolicy(str, Enum):
    """How parsed tables are mapped onto sinks."""

    BY_KIND = "by_kind"  # One sink per table kind (schema drift gets its own sink)
    BY_SCHEMA = "by_schema"  # One sink per distinct column-name sequence


class LineTag(str, Enum):
    """Semantic tag assigned to a console line."""

    BLANK = "blank"
    NOISE = "noise"
    DELIMITER = "delimiter"
    HEADER = "header"
    DATA = "data"


class AssemblerPhase(str, Enum):
    """State of a table assembler."""

    IDLE = "idle"
    AWAITING_HEADER = "awaiting_header"
    IN_DATA_BLOCK = "in_data_block"


class SourceStatus(str, Enum):
    """Final status of one supervised source."""

    COMPLETED = "completed"  # Reached end of stream
    STOPPED = "stopped"  # Stop requested while reading
    FAILED = "failed"  # Read error after opening
    UNAVAILABLE = "unavailable"  # Could not be opened


# === Type aliases ===

Schema = tuple[str, ...]
Row = list[str]
