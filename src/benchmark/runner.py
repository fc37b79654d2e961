"""
Benchmark Runner.

Drives a full comparative run: generates one workload, then benchmarks each
backend in turn over the categories its scenario selects and summarizes the
results. A failing backend never affects the others.
"""

import asyncio
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Collection, Mapping

import structlog

from src.backends.base import StorageBackend
from src.backends.registry import create_backends
from src.benchmark.clock import Clock, MonotonicClock
from src.benchmark.concurrency import ConcurrencyHarness
from src.benchmark.metrics import BatchWriteResult, ConcurrencyResult, PhaseResult
from src.benchmark.operations import READ_OPERATIONS, MessageInserts, ReadContext, bind_read
from src.benchmark.phases import EntityBatchWriter, PhaseRunner, describe_error
from src.benchmark.report import (
    BackendReport,
    BackendStatus,
    BenchmarkReport,
    save_report,
    summarize,
)
from src.config.settings import ReadSettings, Settings, get_settings
from src.core.exceptions import BackendConnectionError
from src.observability.logging import LogContext, run_id_var
from src.workload.generator import EntityGenerator, GeneratedWorkload
from src.workload.models import Conversation, EntityType
from src.workload.scenarios import BENCHMARK_CATEGORIES, WorkloadScenario, get_scenario

logger = structlog.get_logger(__name__)


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark execution."""

    # Phases
    warmup_runs: int = 3
    benchmark_runs: int = 5
    batch_size: int = 1000

    # Concurrency
    concurrent_users: int = 5
    ops_per_user: int = 20

    # Timing
    call_timeout_seconds: float = 30.0

    # Workload
    scenario: str = "mixed_workload"
    seed: int | None = None
    reads: ReadSettings = field(default_factory=ReadSettings)

    # Output
    output_dir: str = "./reports"
    save_report: bool = True

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.warmup_runs < 0 or self.benchmark_runs < 0:
            raise ValueError("run counts must be non-negative")
        if self.concurrent_users < 0 or self.ops_per_user < 0:
            raise ValueError("concurrency parameters must be non-negative")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BenchmarkConfig":
        settings = settings or get_settings()
        bench = settings.benchmark
        return cls(
            warmup_runs=bench.warmup_runs,
            benchmark_runs=bench.benchmark_runs,
            batch_size=bench.batch_size,
            concurrent_users=bench.concurrent_users,
            ops_per_user=bench.ops_per_user,
            call_timeout_seconds=bench.call_timeout_seconds,
            scenario=bench.scenario,
            seed=bench.seed,
            reads=settings.reads,
            output_dir=bench.output_dir,
            save_report=bench.save_report,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "warmup_runs": self.warmup_runs,
            "benchmark_runs": self.benchmark_runs,
            "batch_size": self.batch_size,
            "concurrent_users": self.concurrent_users,
            "ops_per_user": self.ops_per_user,
            "call_timeout_seconds": self.call_timeout_seconds,
            "seed": self.seed,
        }


class BenchmarkRunner:
    """
    Runs the benchmark suite against several backends.

    Features:
    - One seeded workload shared by every backend
    - Warmup and measurement phases per operation
    - Connection failures isolated per backend
    - Report persistence
    """

    def __init__(
        self,
        config: BenchmarkConfig | None = None,
        clock: Clock | None = None,
        generator: EntityGenerator | None = None,
    ):
        self.config = config or BenchmarkConfig()
        self.clock = clock or MonotonicClock()
        self.generator = generator or EntityGenerator.seeded(self.config.seed)

        self.phase_runner = PhaseRunner(
            clock=self.clock,
            call_timeout=self.config.call_timeout_seconds,
            batch_size=self.config.batch_size,
        )
        self.batch_writer = EntityBatchWriter(
            clock=self.clock, call_timeout=self.config.call_timeout_seconds
        )
        self.harness = ConcurrencyHarness(
            generator=self.generator,
            clock=self.clock,
            call_timeout=self.config.call_timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "BenchmarkRunner":
        """Build a runner configured from the application settings."""
        return cls(config=BenchmarkConfig.from_settings(settings), **kwargs)

    async def run_full_benchmark(
        self,
        backends: Mapping[str, StorageBackend],
        scenario: WorkloadScenario | str | None = None,
    ) -> BenchmarkReport:
        """
        Benchmark every backend against one generated workload.

        Args:
            backends: Backends keyed by name, processed in sorted name order
            scenario: Scenario or scenario name; defaults to the configured one

        Returns:
            Comparative report covering every requested backend
        """
        if not isinstance(scenario, WorkloadScenario):
            scenario = get_scenario(scenario or self.config.scenario)

        run_id = uuid.uuid4().hex[:12]
        token = run_id_var.set(run_id)
        started_at = datetime.now(timezone.utc)

        try:
            logger.info(
                "Starting benchmark",
                scenario=scenario.name,
                backends=sorted(backends),
                **self.config.to_dict(),
            )

            workload = self.generator.generate(scenario)

            reports = []
            for name in sorted(backends):
                with LogContext(backend=name):
                    reports.append(
                        await self.benchmark_backend(
                            name, backends[name], workload, scenario.categories
                        )
                    )

            metadata = {
                "run_id": run_id,
                "scenario": scenario.name,
                "categories": list(scenario.categories),
                "started_at": started_at.isoformat(),
                "completed_at": datetime.now(timezone.utc).isoformat(),
                "config": self.config.to_dict(),
                "workload": workload.summary(),
            }
            report = summarize(reports, metadata)

            if self.config.save_report:
                save_report(report, self.config.output_dir)

            return report
        finally:
            run_id_var.reset(token)

    async def benchmark_backend(
        self,
        name: str,
        backend: StorageBackend,
        workload: GeneratedWorkload,
        categories: Collection[str] = BENCHMARK_CATEGORIES,
    ) -> BackendReport:
        """
        Run the selected benchmark categories against one backend.

        The workload is always batch-written first since reads and virtual
        users query it; its timings are reported only when "writes" is
        selected.
        """
        report = BackendReport(backend=name)

        try:
            try:
                await asyncio.wait_for(backend.connect(), timeout=self.config.call_timeout_seconds)
            except Exception as e:
                error = BackendConnectionError(name, describe_error(e))
                logger.error("Backend connection failed", error=str(error))
                report.status = BackendStatus.CONNECTION_FAILED
                report.error = str(error)
                return report

            report.health = await self._probe_health(backend)

            writes = await self.benchmark_writes(backend, workload)
            if "writes" in categories:
                report.writes = writes
            else:
                logger.debug(
                    "Workload loaded", records={k: w.successful_records for k, w in writes.items()}
                )

            if "reads" in categories:
                report.reads = await self.benchmark_reads(backend, workload.conversations)
            if "single_writes" in categories:
                report.single_writes = await self.benchmark_single_writes(
                    backend, workload.conversations
                )
            if "concurrency" in categories:
                report.concurrency = await self.benchmark_concurrency(backend, workload.conversations)

            report.record_counts = await self._collect_record_counts(backend)

            logger.info(
                "Backend benchmark completed",
                categories=list(categories),
                record_counts=report.record_counts,
            )

        except Exception as e:
            logger.error("Backend benchmark failed", error=describe_error(e))
            report.status = BackendStatus.BENCHMARK_FAILED
            report.error = describe_error(e)

        finally:
            try:
                await backend.disconnect()
            except Exception as e:
                logger.warning("Backend disconnect failed", error=describe_error(e))

        return report

    async def benchmark_writes(
        self,
        backend: StorageBackend,
        workload: GeneratedWorkload,
    ) -> dict[str, BatchWriteResult]:
        """Batch-write sellers, buyers, conversations and messages in that order."""
        results = {}
        for entity_type in EntityType:
            results[entity_type.value] = await self.batch_writer.write_batch(
                backend,
                entity_type,
                workload.entities(entity_type),
                self.config.batch_size,
            )
        return results

    async def benchmark_reads(
        self,
        backend: StorageBackend,
        conversations: list[Conversation],
    ) -> dict[str, PhaseResult]:
        """Time every read operation through the phase runner."""
        context = ReadContext(
            conversations=conversations,
            settings=self.config.reads,
            rng=random.Random(self.generator.rng.getrandbits(64)),
        )
        results = {}
        for name, operation in READ_OPERATIONS.items():
            results[name] = await self.phase_runner.run(
                bind_read(operation, context),
                backend,
                self.config.warmup_runs,
                self.config.benchmark_runs,
                name=name,
            )
        return results

    async def benchmark_single_writes(
        self,
        backend: StorageBackend,
        conversations: list[Conversation],
    ) -> dict[str, PhaseResult]:
        """Time batch_size one-at-a-time message inserts per iteration."""
        inserts = MessageInserts(self.generator, conversations, self.config.batch_size)
        result = await self.phase_runner.run(
            inserts,
            backend,
            self.config.warmup_runs,
            self.config.benchmark_runs,
            name=inserts.name,
        )
        return {inserts.name: result}

    async def benchmark_concurrency(
        self,
        backend: StorageBackend,
        conversations: list[Conversation],
    ) -> ConcurrencyResult:
        return await self.harness.run(
            backend,
            conversations,
            self.config.concurrent_users,
            self.config.ops_per_user,
            messages_limit=self.config.reads.messages_limit,
        )

    async def check_health(self, backends: Mapping[str, StorageBackend]) -> dict[str, dict[str, Any]]:
        """
        Connect to each backend and report its health and record counts.

        Failures are reported per backend as unhealthy, never raised.
        """
        results: dict[str, dict[str, Any]] = {}
        timeout = self.config.call_timeout_seconds

        for name in sorted(backends):
            backend = backends[name]
            try:
                await asyncio.wait_for(backend.connect(), timeout=timeout)
                health = await asyncio.wait_for(backend.health_check(), timeout=timeout)
                counts = await asyncio.wait_for(backend.get_metrics(), timeout=timeout)
                results[name] = {**health, "record_counts": counts}
            except Exception as e:
                logger.warning("Health check failed", backend=name, error=describe_error(e))
                results[name] = {"status": "unhealthy", "error": describe_error(e)}
            finally:
                try:
                    await backend.disconnect()
                except Exception as e:
                    logger.warning("Backend disconnect failed", backend=name, error=describe_error(e))

        return results

    async def _probe_health(self, backend: StorageBackend) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(
                backend.health_check(), timeout=self.config.call_timeout_seconds
            )
        except Exception as e:
            logger.warning("Health probe failed", error=describe_error(e))
            return {"status": "unhealthy", "error": describe_error(e)}

    async def _collect_record_counts(self, backend: StorageBackend) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(
                backend.get_metrics(), timeout=self.config.call_timeout_seconds
            )
        except Exception as e:
            logger.warning("Record count collection failed", error=describe_error(e))
            return {"error": describe_error(e)}


async def run_configured_benchmark(
    settings: Settings | None = None,
    **runner_kwargs: Any,
) -> BenchmarkReport:
    """
    Benchmark the backends named in settings with the configured scenario.

    Raises:
        UnknownBackendError: If a configured name is not a known backend
        BackendNotRegisteredError: If a configured backend has no adapter
    """
    settings = settings or get_settings()
    backends = create_backends(settings.benchmark.backends)
    runner = BenchmarkRunner.from_settings(settings, **runner_kwargs)
    return await runner.run_full_benchmark(backends)
