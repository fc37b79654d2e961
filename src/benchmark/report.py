"""
Benchmark Report.

Aggregates per-backend results into a comparative report and picks a
winner per category:
- writes: highest mean records_per_second across entity types
- reads: lowest mean latency across read operations
- concurrency: highest ops_per_second

Only completed backends compete. Ties go to the lexicographically smallest
backend name.
"""

import json
import statistics
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable

import structlog

from src.benchmark.metrics import BatchWriteResult, ConcurrencyResult, PhaseResult

logger = structlog.get_logger(__name__)

CATEGORIES = ("writes", "reads", "concurrency")


class BackendStatus(str, Enum):
    """Outcome of benchmarking one backend."""

    COMPLETED = "completed"
    CONNECTION_FAILED = "connection_failed"
    BENCHMARK_FAILED = "benchmark_failed"


@dataclass
class BackendReport:
    """Everything measured for one backend."""

    backend: str
    status: BackendStatus = BackendStatus.COMPLETED
    error: str | None = None
    health: dict[str, Any] = field(default_factory=dict)
    record_counts: dict[str, Any] = field(default_factory=dict)
    writes: dict[str, BatchWriteResult] = field(default_factory=dict)
    reads: dict[str, PhaseResult] = field(default_factory=dict)
    single_writes: dict[str, PhaseResult] = field(default_factory=dict)
    concurrency: ConcurrencyResult | None = None

    @property
    def write_throughput(self) -> float | None:
        """Mean records_per_second across entity types."""
        if not self.writes:
            return None
        return statistics.mean(w.records_per_second for w in self.writes.values())

    @property
    def read_latency_ms(self) -> float | None:
        """Mean latency across read operations that have statistics."""
        means = [r.stats.mean_ms for r in self.reads.values() if r.stats is not None]
        if not means:
            return None
        return statistics.mean(means)

    @property
    def concurrency_throughput(self) -> float | None:
        if self.concurrency is None:
            return None
        return self.concurrency.ops_per_second

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "error": self.error,
            "health": self.health,
            "record_counts": self.record_counts,
            "writes": {name: w.to_dict() for name, w in self.writes.items()},
            "reads": {name: r.to_dict() for name, r in self.reads.items()},
            "single_writes": {name: r.to_dict() for name, r in self.single_writes.items()},
            "concurrency": self.concurrency.to_dict() if self.concurrency else None,
        }


@dataclass
class Winner:
    backend: str
    metric: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"backend": self.backend, "metric": self.metric, "value": round(self.value, 3)}


@dataclass
class BenchmarkReport:
    """Comparative report over all requested backends."""

    metadata: dict[str, Any] = field(default_factory=dict)
    backends: dict[str, BackendReport] = field(default_factory=dict)
    winner: dict[str, Winner | None] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata,
            "backends": {name: b.to_dict() for name, b in self.backends.items()},
            "winner": {
                category: w.to_dict() if w else None for category, w in self.winner.items()
            },
        }


# Category -> (metric name, scalar extractor, higher is better)
_SCORING: dict[str, tuple[str, Callable[[BackendReport], float | None], bool]] = {
    "writes": ("records_per_second", lambda b: b.write_throughput, True),
    "reads": ("mean_latency_ms", lambda b: b.read_latency_ms, False),
    "concurrency": ("ops_per_second", lambda b: b.concurrency_throughput, True),
}


def select_winner(backends: Iterable[BackendReport], category: str) -> Winner | None:
    """
    Pick the best completed backend for one category.

    Backends without a value for the category are skipped. Returns None
    when no backend qualifies.
    """
    metric, extract, higher_is_better = _SCORING[category]
    best: Winner | None = None

    for report in sorted(backends, key=lambda b: b.backend):
        if report.status is not BackendStatus.COMPLETED:
            continue
        value = extract(report)
        if value is None:
            continue
        if best is None:
            best = Winner(backend=report.backend, metric=metric, value=value)
            continue
        better = value > best.value if higher_is_better else value < best.value
        if better:
            best = Winner(backend=report.backend, metric=metric, value=value)

    return best


def summarize(
    backend_reports: Iterable[BackendReport],
    metadata: dict[str, Any] | None = None,
) -> BenchmarkReport:
    """Build the comparative report and select the per-category winners."""
    reports = sorted(backend_reports, key=lambda b: b.backend)
    report = BenchmarkReport(
        metadata=dict(metadata or {}),
        backends={b.backend: b for b in reports},
        winner={category: select_winner(reports, category) for category in CATEGORIES},
    )

    logger.info(
        "Benchmark summarized",
        backends=len(reports),
        completed=sum(1 for b in reports if b.status is BackendStatus.COMPLETED),
        winners={c: w.backend if w else None for c, w in report.winner.items()},
    )
    return report


def save_report(
    report: BenchmarkReport | dict[str, Any],
    output_dir: str | Path,
    filename: str | None = None,
) -> Path:
    """
    Write a report as indented JSON.

    Without a filename a timestamped one is generated; a missing .json
    suffix is appended.
    """
    data = report.to_dict() if isinstance(report, BenchmarkReport) else report

    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    if not filename:
        metadata = data.get("metadata", {})
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        filename = f"benchmark_{metadata.get('scenario', 'run')}_{timestamp}.json"
    if not filename.endswith(".json"):
        filename += ".json"

    filepath = directory / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)

    logger.info("Benchmark report saved", path=str(filepath))
    return filepath


def load_report(path: str | Path) -> dict[str, Any]:
    """Read a report written by save_report."""
    with open(path) as f:
        return json.load(f)


def compare_winners(reports: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Tabulate the winners of several saved reports, one row per report.

    Each row carries the run metadata and the winning backend per category.
    """
    rows = []
    for data in reports:
        metadata = data.get("metadata", {})
        winners = data.get("winner", {})
        row: dict[str, Any] = {
            "run_id": metadata.get("run_id"),
            "scenario": metadata.get("scenario"),
            "started_at": metadata.get("started_at"),
        }
        for category in CATEGORIES:
            entry = winners.get(category)
            row[category] = entry["backend"] if entry else None
        rows.append(row)
    return rows
