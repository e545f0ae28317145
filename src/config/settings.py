# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for graph connection, analytics defaults and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Graph database ===
    graph_db_type: Literal["memgraph", "neo4j"] = "memgraph"
    graph_db_uri: str = "bolt://localhost:7687"
    graph_db_user: str = ""
    graph_db_password: str = ""
    graph_db_database: str = ""

    # === Project ===
    project_id: str = ""

    # === Relevance (PPR) ===
    ppr_max_results: int = 100
    ppr_iterations: int = 20
    ppr_damping: float = 0.85
    ppr_hop_radius: int = 3

    # === Community detection ===
    community_root_marker: str = "src"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("ppr_damping")
    @classmethod
    def validate_damping(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 1.0:
            raise ValueError("ppr_damping must be within [0, 1]")
        return v

    @field_validator("community_root_marker")
    @classmethod
    def validate_root_marker(cls, v: str) -> str:  # noqa: N805
        v = v.strip()
        if not v or "/" in v:
            raise ValueError("community_root_marker must be a single path segment")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not 1 <= self.ppr_hop_radius <= 10:
            errors.append("PPR_HOP_RADIUS must be between 1 and 10")

        if self.ppr_max_results < 1 or self.ppr_iterations < 1:
            errors.append("PPR_MAX_RESULTS and PPR_ITERATIONS must be >= 1")

        if self.graph_db_password and not self.graph_db_user:
            errors.append("GRAPH_DB_PASSWORD is set but GRAPH_DB_USER is empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-project config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
