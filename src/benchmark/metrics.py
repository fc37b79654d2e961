"""
Benchmark Result Records.

Descriptive latency statistics and the per-phase, per-entity and
concurrency result records the aggregator consumes.

Two throughput figures are kept apart on purpose:
- ops_per_second: configured batch size over mean call latency (phases),
  or operations over wall-clock span (concurrency)
- records_per_second: records written over total elapsed time (batch writes)
"""

import statistics
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LatencyStats:
    """Latency statistics over successful calls."""

    count: int = 0
    min_ms: float = 0.0
    max_ms: float = 0.0
    mean_ms: float = 0.0
    median_ms: float = 0.0
    std_dev_ms: float = 0.0

    @classmethod
    def from_samples(cls, samples_ms: list[float]) -> "LatencyStats | None":
        """Calculate statistics, or None when there are no samples."""
        if not samples_ms:
            return None

        n = len(samples_ms)
        return cls(
            count=n,
            min_ms=min(samples_ms),
            max_ms=max(samples_ms),
            mean_ms=statistics.mean(samples_ms),
            median_ms=statistics.median(samples_ms),
            std_dev_ms=statistics.stdev(samples_ms) if n > 1 else 0.0,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "count": self.count,
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "mean_ms": round(self.mean_ms, 3),
            "median_ms": round(self.median_ms, 3),
            "std_dev_ms": round(self.std_dev_ms, 3),
        }


def _round(value: float | None, digits: int = 2) -> float | None:
    return round(value, digits) if value is not None else None


@dataclass
class PhaseResult:
    """Warmup and measurement samples for one operation against one backend."""

    operation: str
    batch_size: int
    warmup_samples_ms: list[float] = field(default_factory=list)
    samples_ms: list[float] = field(default_factory=list)
    invocations: int = 0
    errors: int = 0
    warmup_errors: int = 0
    error_messages: list[str] = field(default_factory=list)
    stats: LatencyStats | None = None

    def calculate_stats(self) -> None:
        self.stats = LatencyStats.from_samples(self.samples_ms)

    @property
    def ops_per_second(self) -> float | None:
        if self.stats is None or self.stats.mean_ms <= 0:
            return None
        return self.batch_size / (self.stats.mean_ms / 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "invocations": self.invocations,
            "errors": self.errors,
            "warmup_errors": self.warmup_errors,
            "warmup_ms": [round(s, 3) for s in self.warmup_samples_ms],
            "samples_ms": [round(s, 3) for s in self.samples_ms],
            "latency": self.stats.to_dict() if self.stats else None,
            "ops_per_second": _round(self.ops_per_second),
            "error_messages": self.error_messages[:10],
        }


@dataclass
class BatchWriteResult:
    """Chunked write of one entity collection to one backend."""

    entity_type: str
    batch_size: int
    records: int = 0
    successful_records: int = 0
    batch_times_ms: list[float] = field(default_factory=list)
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)

    @property
    def batches(self) -> int:
        return len(self.batch_times_ms)

    @property
    def total_time_ms(self) -> float:
        return sum(self.batch_times_ms)

    @property
    def records_per_second(self) -> float:
        if self.total_time_ms <= 0:
            return 0.0
        return self.successful_records / (self.total_time_ms / 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "records": self.records,
            "successful_records": self.successful_records,
            "batch_size": self.batch_size,
            "batches": self.batches,
            "errors": self.errors,
            "total_time_ms": round(self.total_time_ms, 3),
            "batch_times_ms": [round(t, 3) for t in self.batch_times_ms],
            "records_per_second": round(self.records_per_second, 2),
            "error_messages": self.error_messages[:10],
        }


@dataclass
class VirtualUserResult:
    """Operations issued by one virtual user."""

    user_id: int
    operations: int = 0
    reads: int = 0
    writes: int = 0
    errors: int = 0
    latencies_ms: list[float] = field(default_factory=list)
    completed_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        stats = LatencyStats.from_samples(self.latencies_ms)
        return {
            "user_id": self.user_id,
            "operations": self.operations,
            "reads": self.reads,
            "writes": self.writes,
            "errors": self.errors,
            "mean_latency_ms": round(stats.mean_ms, 3) if stats else None,
        }


@dataclass
class ConcurrencyResult:
    """Mixed read/write load from concurrent virtual users."""

    concurrent_users: int
    ops_per_user: int
    duration_ms: float = 0.0
    users: list[VirtualUserResult] = field(default_factory=list)

    @property
    def total_operations(self) -> int:
        return sum(u.operations for u in self.users)

    @property
    def total_errors(self) -> int:
        return sum(u.errors for u in self.users)

    @property
    def latency(self) -> LatencyStats | None:
        return LatencyStats.from_samples([ms for u in self.users for ms in u.latencies_ms])

    @property
    def mean_latency_ms(self) -> float | None:
        stats = self.latency
        return stats.mean_ms if stats else None

    @property
    def ops_per_second(self) -> float:
        if self.duration_ms <= 0:
            return 0.0
        return self.total_operations / (self.duration_ms / 1000)

    @property
    def error_rate(self) -> float:
        planned = self.concurrent_users * self.ops_per_user
        if planned == 0:
            return 0.0
        return self.total_errors / planned

    def to_dict(self) -> dict[str, Any]:
        stats = self.latency
        return {
            "concurrent_users": self.concurrent_users,
            "ops_per_user": self.ops_per_user,
            "total_operations": self.total_operations,
            "total_errors": self.total_errors,
            "duration_ms": round(self.duration_ms, 3),
            "mean_latency_ms": round(stats.mean_ms, 3) if stats else None,
            "latency": stats.to_dict() if stats else None,
            "ops_per_second": round(self.ops_per_second, 2),
            "error_rate": round(self.error_rate, 4),
            "users": [u.to_dict() for u in self.users],
        }
