"""fixtureid configuration management.

Loads configuration from environment variables with sensible defaults.
The reconciliation engine itself only needs ReconcileConfig; database and
ingestion settings are used by the pipeline and CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class DBConfig:
    """Database connection configuration."""

    url: str
    echo: bool = False  # SQL logging


@dataclass
class ReconcileConfig:
    """Fixture matching tolerances and identity settings."""

    match_threshold: float = 0.3  # 2D distance (metres) for "same slot"
    fixture_id_length: int = 10


@dataclass
class IngestConfig:
    """Location-master parsing and block-type lookup settings."""

    min_columns: int = 14
    fixture_id_column: int = 14
    block_types_url: str = "http://localhost:8000/api/fixtures/block-types"
    block_types_timeout: float = 30.0


@dataclass
class AppConfig:
    """Root application configuration."""

    db: DBConfig
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Path | None = None

    reconcile: ReconcileConfig = field(default_factory=ReconcileConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Optional (with defaults):
        - DATABASE_URL: SQLAlchemy async URL (default: local SQLite file)
        - LOG_LEVEL: Logging verbosity (default: "INFO")
        - MATCH_THRESHOLD: Same-slot distance in metres (default: 0.3)
        - LOG_FILE: Also write logs to this file (default: none)

        Raises:
            ValueError: If a numeric setting cannot be parsed
        """
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("JSON_LOGS", "false").lower() == "true",
            log_file=Path(os.environ["LOG_FILE"]) if os.getenv("LOG_FILE") else None,
            db=DBConfig(
                url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./fixtureid.db"),
                echo=os.getenv("DB_ECHO", "false").lower() == "true",
            ),
            reconcile=ReconcileConfig(
                match_threshold=float(os.getenv("MATCH_THRESHOLD", "0.3")),
                fixture_id_length=int(os.getenv("FIXTURE_ID_LENGTH", "10")),
            ),
            ingest=IngestConfig(
                min_columns=int(os.getenv("MIN_COLUMNS", "14")),
                fixture_id_column=int(os.getenv("FIXTURE_ID_COLUMN", "14")),
                block_types_url=os.getenv(
                    "BLOCK_TYPES_URL", "http://localhost:8000/api/fixtures/block-types"
                ),
                block_types_timeout=float(os.getenv("BLOCK_TYPES_TIMEOUT", "30")),
            ),
        )


# Singleton instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create singleton AppConfig instance from environment.

    Returns:
        AppConfig: Application configuration
    """
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
