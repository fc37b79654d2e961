"""
Storage Benchmark Engine.

Measures and compares storage backends under one synthetic workload:
- Batched entity writes
- Read operations with warmup and measurement phases
- Mixed read/write load from concurrent virtual users
- Comparative report with per-category winners
"""

from src.benchmark.clock import Clock, MonotonicClock
from src.benchmark.concurrency import ConcurrencyHarness
from src.benchmark.metrics import (
    BatchWriteResult,
    ConcurrencyResult,
    LatencyStats,
    PhaseResult,
    VirtualUserResult,
)
from src.benchmark.operations import READ_OPERATIONS, MessageInserts, ReadContext
from src.benchmark.phases import EntityBatchWriter, PhaseRunner
from src.benchmark.report import (
    BackendReport,
    BackendStatus,
    BenchmarkReport,
    Winner,
    compare_winners,
    load_report,
    save_report,
    summarize,
)
from src.benchmark.runner import BenchmarkConfig, BenchmarkRunner, run_configured_benchmark

__all__ = [
    "Clock",
    "MonotonicClock",
    "ConcurrencyHarness",
    "BatchWriteResult",
    "ConcurrencyResult",
    "LatencyStats",
    "PhaseResult",
    "VirtualUserResult",
    "READ_OPERATIONS",
    "MessageInserts",
    "ReadContext",
    "EntityBatchWriter",
    "PhaseRunner",
    "BackendReport",
    "BackendStatus",
    "BenchmarkReport",
    "Winner",
    "compare_winners",
    "load_report",
    "save_report",
    "summarize",
    "BenchmarkConfig",
    "BenchmarkRunner",
    "run_configured_benchmark",
]
