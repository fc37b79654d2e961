"""
Unit Tests for the Benchmark Report.

Tests winner selection, serialization and persistence.
"""

from pathlib import Path

import pytest

from src.benchmark.metrics import (
    BatchWriteResult,
    ConcurrencyResult,
    PhaseResult,
    VirtualUserResult,
)
from src.benchmark.report import (
    BackendReport,
    BackendStatus,
    compare_winners,
    load_report,
    save_report,
    select_winner,
    summarize,
)


def make_report(
    name: str,
    write_rps: list[float] | None = None,
    read_means: list[float] | None = None,
    concurrency_ops: int | None = None,
    status: BackendStatus = BackendStatus.COMPLETED,
) -> BackendReport:
    """Build a backend report whose scalars are easy to predict."""
    report = BackendReport(backend=name, status=status)

    for i, rps in enumerate(write_rps or []):
        # rps records written in exactly one second
        report.writes[f"entity_{i}"] = BatchWriteResult(
            entity_type=f"entity_{i}",
            batch_size=10,
            records=int(rps),
            successful_records=int(rps),
            batch_times_ms=[1000.0],
        )

    for i, mean in enumerate(read_means or []):
        phase = PhaseResult(operation=f"read_{i}", batch_size=10, samples_ms=[mean, mean])
        phase.calculate_stats()
        report.reads[phase.operation] = phase

    if concurrency_ops is not None:
        # concurrency_ops operations over exactly one second
        report.concurrency = ConcurrencyResult(
            concurrent_users=1,
            ops_per_user=concurrency_ops,
            duration_ms=1000.0,
            users=[VirtualUserResult(user_id=0, operations=concurrency_ops, latencies_ms=[1.0])],
        )

    return report


# =============================================================================
# Winner Selection
# =============================================================================


class TestWinnerSelection:
    """Test per-category winner rules."""

    def test_writes_highest_mean_throughput(self) -> None:
        reports = [
            make_report("a", write_rps=[100, 300]),  # mean 200
            make_report("b", write_rps=[250, 250]),  # mean 250
        ]

        winner = select_winner(reports, "writes")

        assert winner.backend == "b"
        assert winner.metric == "records_per_second"
        assert winner.value == pytest.approx(250.0)

    def test_reads_lowest_mean_latency(self) -> None:
        reports = [
            make_report("a", read_means=[5.0, 7.0]),  # mean 6
            make_report("b", read_means=[2.0, 12.0]),  # mean 7
        ]

        winner = select_winner(reports, "reads")

        assert winner.backend == "a"
        assert winner.metric == "mean_latency_ms"
        assert winner.value == pytest.approx(6.0)

    def test_reads_skip_operations_without_stats(self) -> None:
        report = make_report("a", read_means=[4.0])
        failed = PhaseResult(operation="broken", batch_size=10)
        failed.calculate_stats()
        report.reads["broken"] = failed

        assert report.read_latency_ms == pytest.approx(4.0)

    def test_concurrency_highest_throughput(self) -> None:
        reports = [make_report("a", concurrency_ops=50), make_report("b", concurrency_ops=80)]

        winner = select_winner(reports, "concurrency")

        assert winner.backend == "b"
        assert winner.value == pytest.approx(80.0)

    def test_tie_goes_to_smallest_name(self) -> None:
        reports = [
            make_report("zeta", concurrency_ops=10),
            make_report("alpha", concurrency_ops=10),
            make_report("mid", concurrency_ops=10),
        ]

        assert select_winner(reports, "concurrency").backend == "alpha"

    def test_failed_backends_do_not_compete(self) -> None:
        reports = [
            make_report("a", concurrency_ops=10),
            make_report("b", concurrency_ops=1000, status=BackendStatus.BENCHMARK_FAILED),
            make_report("c", status=BackendStatus.CONNECTION_FAILED),
        ]

        assert select_winner(reports, "concurrency").backend == "a"

    def test_no_candidates(self) -> None:
        reports = [make_report("a"), make_report("b", status=BackendStatus.CONNECTION_FAILED)]

        assert select_winner(reports, "writes") is None
        assert select_winner(reports, "reads") is None
        assert select_winner(reports, "concurrency") is None


# =============================================================================
# Summarize
# =============================================================================


class TestSummarize:
    """Test report assembly."""

    def test_report_keeps_every_backend(self) -> None:
        report = summarize(
            [
                make_report("b", write_rps=[10], read_means=[1.0], concurrency_ops=5),
                make_report("a", status=BackendStatus.CONNECTION_FAILED),
            ],
            metadata={"scenario": "custom"},
        )

        assert list(report.backends) == ["a", "b"]
        assert report.metadata == {"scenario": "custom"}
        assert {c: w.backend for c, w in report.winner.items()} == {
            "writes": "b",
            "reads": "b",
            "concurrency": "b",
        }

    def test_to_dict_shape(self) -> None:
        failed = make_report("down", status=BackendStatus.CONNECTION_FAILED)
        failed.error = "down connection failed: refused"
        report = summarize([make_report("up", write_rps=[10], read_means=[1.0]), failed])

        data = report.to_dict()

        assert set(data) == {"metadata", "backends", "winner"}
        assert data["backends"]["down"]["status"] == "connection_failed"
        assert data["backends"]["down"]["error"] == "down connection failed: refused"
        up = data["backends"]["up"]
        assert set(up) == {
            "status",
            "error",
            "health",
            "record_counts",
            "writes",
            "reads",
            "single_writes",
            "concurrency",
        }
        assert up["concurrency"] is None
        assert data["winner"]["concurrency"] is None
        assert data["winner"]["writes"] == {
            "backend": "up",
            "metric": "records_per_second",
            "value": 10.0,
        }

    def test_single_writes_are_not_scored(self) -> None:
        report = make_report("a")
        inserts = PhaseResult(operation="message_inserts", batch_size=10, samples_ms=[1.0])
        inserts.calculate_stats()
        report.single_writes["message_inserts"] = inserts

        summary = summarize([report])

        assert summary.winner["reads"] is None
        assert summary.winner["writes"] is None


# =============================================================================
# Persistence
# =============================================================================


class TestPersistence:
    """Test saving, loading and comparing reports."""

    @pytest.fixture
    def report(self):
        return summarize(
            [make_report("memory", write_rps=[100], read_means=[2.0], concurrency_ops=40)],
            metadata={"run_id": "abc123", "scenario": "custom", "started_at": "2024-06-01T12:00:00+00:00"},
        )

    def test_save_and_load(self, report, tmp_path: Path) -> None:
        path = save_report(report, tmp_path, filename="run")

        assert path == tmp_path / "run.json"
        assert load_report(path) == report.to_dict()

    def test_generated_filename(self, report, tmp_path: Path) -> None:
        path = save_report(report, tmp_path / "nested")

        assert path.parent == tmp_path / "nested"
        assert path.name.startswith("benchmark_custom_")
        assert path.suffix == ".json"

    def test_compare_winners(self, report, tmp_path: Path) -> None:
        other = summarize([make_report("other", concurrency_ops=5)], metadata={"run_id": "def456"})

        rows = compare_winners([report.to_dict(), other.to_dict()])

        assert rows[0] == {
            "run_id": "abc123",
            "scenario": "custom",
            "started_at": "2024-06-01T12:00:00+00:00",
            "writes": "memory",
            "reads": "memory",
            "concurrency": "memory",
        }
        assert rows[1]["run_id"] == "def456"
        assert rows[1]["writes"] is None
        assert rows[1]["concurrency"] == "other"
