"""
Workload Scenarios.

Predefined parameter sets for synthetic workloads:
- custom: small-scale smoke testing
- high_write_volume: high-throughput message ingestion
- read_heavy_analytics: long conversations for analytical reads
- mixed_workload: balanced read/write operations

Each scenario also names the benchmark categories it runs.
"""

from pydantic import BaseModel, Field, field_validator

from src.core.exceptions import UnknownScenarioError
from src.workload.models import Platform

# Batched entity writes, timed reads, one-at-a-time inserts, virtual users
BENCHMARK_CATEGORIES = ("writes", "reads", "single_writes", "concurrency")


class WorkloadScenario(BaseModel):
    """Entity counts, fan-out ratios and benchmark categories for one run."""

    name: str = Field(default="custom", description="Scenario name")
    description: str = Field(default="", description="What the scenario stresses")
    sellers: int = Field(default=10, ge=0)
    buyers: int = Field(default=100, ge=0)
    conversations_per_seller: int = Field(default=10, ge=0)
    messages_per_conversation: int = Field(default=50, ge=0)
    platform_split: dict[Platform, float] = Field(
        default_factory=lambda: {Platform.WHATSAPP: 0.7, Platform.INSTAGRAM: 0.3},
        description="Share of buyers per platform",
    )
    categories: tuple[str, ...] = Field(
        default=BENCHMARK_CATEGORIES,
        description="Benchmark categories run for this scenario",
    )

    @field_validator("platform_split")
    @classmethod
    def _split_sums_to_one(cls, v: dict[Platform, float]) -> dict[Platform, float]:
        if any(share < 0 for share in v.values()):
            raise ValueError("platform shares must be non-negative")
        if abs(sum(v.values()) - 1.0) > 1e-6:
            raise ValueError("platform shares must sum to 1.0")
        return v

    @field_validator("categories")
    @classmethod
    def _known_categories(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        unknown = set(v) - set(BENCHMARK_CATEGORIES)
        if unknown:
            raise ValueError(f"unknown benchmark categories: {sorted(unknown)}")
        return tuple(c for c in BENCHMARK_CATEGORIES if c in v)

    @property
    def max_conversations(self) -> int:
        return self.sellers * self.conversations_per_seller


SCENARIOS: dict[str, WorkloadScenario] = {
    "custom": WorkloadScenario(
        name="custom",
        description="Small-scale testing",
        sellers=10,
        buyers=100,
        conversations_per_seller=10,
        messages_per_conversation=50,
        categories=("single_writes", "reads"),
    ),
    "high_write_volume": WorkloadScenario(
        name="high_write_volume",
        description="High-throughput message ingestion",
        sellers=100,
        buyers=1000,
        conversations_per_seller=50,
        messages_per_conversation=200,
        categories=("writes", "single_writes"),
    ),
    "read_heavy_analytics": WorkloadScenario(
        name="read_heavy_analytics",
        description="Complex analytical queries over long conversations",
        sellers=50,
        buyers=500,
        conversations_per_seller=30,
        messages_per_conversation=500,
        categories=("reads",),
    ),
    "mixed_workload": WorkloadScenario(
        name="mixed_workload",
        description="Balanced read/write operations",
        sellers=200,
        buyers=2000,
        conversations_per_seller=25,
        messages_per_conversation=150,
    ),
}


def get_scenario(name: str, **overrides) -> WorkloadScenario:
    """
    Look up a catalog scenario, optionally overriding some of its fields.

    Raises:
        UnknownScenarioError: If the name is not in the catalog
    """
    try:
        scenario = SCENARIOS[name.lower()]
    except KeyError:
        raise UnknownScenarioError(name, sorted(SCENARIOS)) from None

    if not overrides:
        return scenario
    return WorkloadScenario.model_validate({**scenario.model_dump(), **overrides})


def list_scenarios() -> list[WorkloadScenario]:
    """Get all catalog scenarios."""
    return list(SCENARIOS.values())
