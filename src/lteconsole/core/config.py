"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lteconsole.core.models.base import RoutingPolicy


def _find_config_dir() -> Path:
    """Find the config directory by walking up from the package location.

    Looks for a 'config/' directory next to the project root.
    Falls back to relative Path("config") if not found.
    """
    # Start from this file: src/lteconsole/core/config.py
    # Project root is 4 levels up: config.py -> core/ -> lteconsole/ -> src/ -> root/
    package_dir = Path(__file__).resolve().parent.parent.parent.parent
    candidate = package_dir / "config"
    if candidate.is_dir():
        return candidate

    # Fallback: relative path (works when CWD is project root)
    return Path("config")


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: LTECONSOLE_
    """

    model_config = SettingsConfigDict(
        env_prefix="LTECONSOLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output
    output_dir: Path = Field(
        default=Path("./lte_output"),
        description="Directory receiving one CSV file per sink",
    )

    # Configuration paths
    config_path: Path = Field(
        default_factory=_find_config_dir,
        description="Path to configuration files (table kinds, noise patterns)",
    )
    table_kinds_file: str = Field(
        default="table_kinds.yaml",
        description="Table kind registry file, relative to config_path",
    )

    # Routing
    routing_policy: RoutingPolicy = Field(
        default=RoutingPolicy.BY_KIND,
        description="by_kind: one sink per table kind; by_schema: one sink per column list",
    )
    per_source_sinks: bool = Field(
        default=False,
        description="Keep a separate sink per input source instead of consolidating",
    )

    # Assembler
    reset_schema_on_recurrence: bool = Field(
        default=False,
        description="Forget the learned header when a table kind recurs",
    )

    # Sources
    read_from_start: bool = Field(
        default=True,
        description="Read files from the beginning (False = only new content)",
    )
    follow: bool = Field(
        default=False,
        description="Keep tailing files after reaching the end",
    )
    poll_interval: float = Field(
        default=0.5,
        description="Seconds between polls of a followed file",
    )
    flush_on_idle: bool = Field(
        default=True,
        description="Flush buffered rows whenever a live source goes quiet",
    )

    # Shutdown
    shutdown_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for workers to finish after a stop request",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")  # 'json' or 'console'

    @property
    def table_kinds_path(self) -> Path:
        """Full path of the table kind registry file."""
        return self.config_path / self.table_kinds_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
