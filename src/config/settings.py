"""
Application Settings - Pydantic Settings for configuration management.

Supports environment variables and .env file loading.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def normalize_to_lowercase(v: str) -> str:
    """Normalize string to lowercase."""
    if isinstance(v, str):
        return v.lower()
    return v


def split_comma_separated(v: str | list[str]) -> list[str]:
    """Accept "a,b,c" from the environment as well as a real list."""
    if isinstance(v, str):
        return [item.strip().lower() for item in v.split(",") if item.strip()]
    return v


class BenchmarkSettings(BaseSettings):
    """Benchmark run parameters."""

    model_config = SettingsConfigDict(env_prefix="BENCHMARK_")

    # Phase settings
    warmup_runs: int = Field(default=3, ge=0, description="Discarded warmup iterations per operation")
    benchmark_runs: int = Field(default=5, ge=0, description="Recorded measurement iterations per operation")
    batch_size: int = Field(default=1000, ge=1, description="Records per batched write")

    # Concurrency settings
    concurrent_users: int = Field(default=5, ge=0, description="Virtual users in the concurrency test")
    ops_per_user: int = Field(default=20, ge=0, description="Operations issued by each virtual user")

    # Deadline applied to every adapter call
    call_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-call timeout in seconds")

    # Workload
    scenario: Annotated[str, BeforeValidator(normalize_to_lowercase)] = Field(
        default="mixed_workload", description="Workload scenario name"
    )
    backends: Annotated[list[str], NoDecode, BeforeValidator(split_comma_separated)] = Field(
        default=["scylladb", "clickhouse", "timescaledb", "cockroachdb"],
        description="Backends to benchmark, in any order",
    )
    seed: int | None = Field(default=None, description="Random seed for reproducible workloads")

    # Output
    output_dir: str = Field(default="./reports", description="Directory for JSON reports")
    save_report: bool = Field(default=True, description="Persist the report after a full run")


class ReadSettings(BaseSettings):
    """Parameters for the read operations under test."""

    model_config = SettingsConfigDict(env_prefix="READ_")

    messages_limit: int = Field(default=100, ge=1, description="Messages fetched per conversation read")
    recent_minutes: int = Field(default=5, ge=1, description="Window for recent-message reads")
    recent_limit: int = Field(default=1000, ge=1, description="Max recent messages returned")
    inactive_minutes: int = Field(default=5, ge=1, description="Inactivity threshold in minutes")
    search_term: str = Field(default="order", description="Term used by message search")
    search_limit: int = Field(default=100, ge=1, description="Max search results returned")


class ObservabilitySettings(BaseSettings):
    """Observability and logging settings."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format (json for CI, console for interactive runs)"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    # Sub-settings
    benchmark: BenchmarkSettings = Field(default_factory=BenchmarkSettings)
    reads: ReadSettings = Field(default_factory=ReadSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
