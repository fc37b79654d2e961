"""
Phase Runner and Entity Batch Writer.

Both issue calls strictly sequentially against one backend: each call is
awaited before the next one starts. Failures are counted, never raised.
"""

import asyncio
from typing import Any, Awaitable, Callable, Sequence

import structlog

from src.backends.base import StorageBackend
from src.benchmark.clock import Clock, MonotonicClock, elapsed_ms
from src.benchmark.metrics import BatchWriteResult, PhaseResult
from src.workload.models import EntityType

logger = structlog.get_logger(__name__)

Operation = Callable[[StorageBackend], Awaitable[Any]]


def describe_error(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    return f"{type(error).__name__}: {error}"


class PhaseRunner:
    """
    Times one operation against one backend.

    Warmup iterations run first and are discarded; measurement iterations
    follow and feed the statistics.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        call_timeout: float = 30.0,
        batch_size: int = 1,
    ):
        self.clock = clock or MonotonicClock()
        self.call_timeout = call_timeout
        self.batch_size = batch_size

    async def run(
        self,
        operation: Operation,
        backend: StorageBackend,
        warmup_runs: int,
        measurement_runs: int,
        name: str | None = None,
    ) -> PhaseResult:
        """
        Run an operation warmup_runs + measurement_runs times.

        Args:
            operation: Coroutine function taking the backend
            backend: Backend under test
            warmup_runs: Iterations whose errors are swallowed
            measurement_runs: Iterations recorded in the result
            name: Operation name for the result and logs

        Returns:
            Phase result; stats is None when every measured call failed
        """
        if warmup_runs < 0 or measurement_runs < 0:
            raise ValueError("run counts must be non-negative")

        name = name or getattr(operation, "__name__", "operation")
        result = PhaseResult(operation=name, batch_size=self.batch_size)

        for i in range(warmup_runs):
            result.invocations += 1
            start = self.clock.now()
            try:
                await asyncio.wait_for(operation(backend), timeout=self.call_timeout)
            except Exception as e:
                result.warmup_errors += 1
                logger.warning("Warmup iteration failed", operation=name, iteration=i + 1, error=describe_error(e))
            result.warmup_samples_ms.append(elapsed_ms(self.clock, start))

        for i in range(measurement_runs):
            result.invocations += 1
            start = self.clock.now()
            try:
                await asyncio.wait_for(operation(backend), timeout=self.call_timeout)
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"Iteration {i + 1}: {describe_error(e)}")
                logger.warning("Measured iteration failed", operation=name, iteration=i + 1, error=describe_error(e))
                continue
            result.samples_ms.append(elapsed_ms(self.clock, start))

        result.calculate_stats()

        logger.info(
            "Phase completed",
            operation=name,
            samples=len(result.samples_ms),
            errors=result.errors,
            mean_latency_ms=round(result.stats.mean_ms, 3) if result.stats else None,
        )
        return result


class EntityBatchWriter:
    """Writes an entity collection in consecutive fixed-size chunks."""

    def __init__(self, clock: Clock | None = None, call_timeout: float = 30.0):
        self.clock = clock or MonotonicClock()
        self.call_timeout = call_timeout

    async def write_batch(
        self,
        backend: StorageBackend,
        entity_type: EntityType,
        entities: Sequence[Any],
        batch_size: int,
    ) -> BatchWriteResult:
        """
        Write entities chunk by chunk through the backend's batch method.

        A failed chunk is counted and skipped; chunks already written stay
        written and later chunks still run.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        write = backend.batch_writer_for(entity_type)
        result = BatchWriteResult(
            entity_type=entity_type.value,
            batch_size=batch_size,
            records=len(entities),
        )

        for offset in range(0, len(entities), batch_size):
            chunk = entities[offset:offset + batch_size]
            start = self.clock.now()
            try:
                await asyncio.wait_for(write(chunk), timeout=self.call_timeout)
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"Batch {result.batches + 1}: {describe_error(e)}")
                logger.warning(
                    "Batch write failed",
                    entity_type=entity_type.value,
                    batch=result.batches + 1,
                    size=len(chunk),
                    error=describe_error(e),
                )
            else:
                result.successful_records += len(chunk)
            result.batch_times_ms.append(elapsed_ms(self.clock, start))

        logger.info(
            "Batch write completed",
            entity_type=entity_type.value,
            records=result.records,
            batches=result.batches,
            errors=result.errors,
            records_per_second=round(result.records_per_second, 2),
        )
        return result
