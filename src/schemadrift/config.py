"""⚙️ Run configuration - environment settings and engine limits."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseModel):
    """Limits applied by the execution engine to one run."""

    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum concurrent query units",
    )
    unit_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a single query unit may run before it is abandoned",
    )
    poll_interval: float = Field(
        default=0.05,
        gt=0,
        description="Seconds between timeout checks while units are in flight",
    )
    sample_limit: int = Field(
        default=5,
        ge=0,
        description="Offending values kept per check during local evaluation",
    )


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(env_prefix="SCHEMADRIFT_", case_sensitive=False)

    # Execution
    max_workers: int = Field(default=4, ge=1, le=64)
    unit_timeout: float = Field(default=300.0, gt=0)
    sample_limit: int = Field(default=5, ge=0)

    # Connection acquisition
    connect_retries: int = Field(default=3, ge=0, le=10)
    connect_backoff: float = Field(default=0.5, ge=0)

    # DuckDB session
    duckdb_threads: int = Field(default=2, ge=1, le=64)
    duckdb_memory_limit: str = Field(default="2GB")

    log_level: str = Field(default="INFO")

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Settings":
        """Load settings from a YAML file, environment still taking part."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data.get("settings", data))

    def engine_config(self) -> EngineConfig:
        """Build the engine limits for a run."""
        return EngineConfig(
            max_workers=self.max_workers,
            unit_timeout=self.unit_timeout,
            sample_limit=self.sample_limit,
        )

    def to_duckdb_settings(self) -> dict[str, str]:
        """Generate DuckDB SET statements."""
        return {
            "threads": str(self.duckdb_threads),
            "memory_limit": f"'{self.duckdb_memory_limit}'",
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings from environment."""
    return Settings()
