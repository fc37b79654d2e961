"""
Pytest Configuration and Shared Fixtures.

This module provides shared fixtures for testing the storage benchmark engine.
"""

import random
from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from typing import Any, Sequence
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from src.backends.base import StorageBackend
from src.backends.memory import InMemoryBackend
from src.config.settings import Settings, get_settings
from src.workload.generator import EntityGenerator, GeneratedWorkload
from src.workload.models import Message
from src.workload.scenarios import WorkloadScenario

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Deterministic clock advancing by ``step`` seconds on every reading."""

    def __init__(self, start: float = 0.0, step: float = 0.001):
        self.current = start
        self.step = step
        self.readings = 0

    def now(self) -> float:
        value = self.current
        self.current += self.step
        self.readings += 1
        return value

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock where every reading is 1 ms after the previous one."""
    return FakeClock()


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Generator[Settings, None, None]:
    """Provide settings built from a controlled environment."""
    with patch.dict(
        "os.environ",
        {
            "BENCHMARK_WARMUP_RUNS": "1",
            "BENCHMARK_BENCHMARK_RUNS": "2",
            "BENCHMARK_BATCH_SIZE": "50",
            "BENCHMARK_SEED": "7",
            "BENCHMARK_BACKENDS": "memory, TimescaleDB",
            "READ_SEARCH_TERM": "refund",
        },
    ):
        # Clear cache and get fresh settings
        get_settings.cache_clear()
        yield get_settings()
    get_settings.cache_clear()


# =============================================================================
# Workload Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Frozen wall-clock time used by generators and backends."""
    return FIXED_NOW


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def generator(rng: random.Random) -> EntityGenerator:
    """Seeded generator with a frozen clock."""
    return EntityGenerator(rng=rng, now=lambda: FIXED_NOW)


@pytest.fixture
def small_scenario() -> WorkloadScenario:
    """10 sellers, 100 buyers, 2 conversations each, 5 messages per conversation."""
    return WorkloadScenario(
        name="small",
        sellers=10,
        buyers=100,
        conversations_per_seller=2,
        messages_per_conversation=5,
    )


@pytest.fixture
def tiny_scenario() -> WorkloadScenario:
    return WorkloadScenario(
        name="tiny",
        sellers=2,
        buyers=6,
        conversations_per_seller=2,
        messages_per_conversation=3,
    )


@pytest.fixture
def small_workload(generator: EntityGenerator, small_scenario: WorkloadScenario) -> GeneratedWorkload:
    return generator.generate(small_scenario)


# =============================================================================
# Backend Fixtures
# =============================================================================


class FlakyBackend(InMemoryBackend):
    """
    In-memory backend whose selected message batches fail.

    Batch calls are numbered from 1; numbers in ``failing_batches`` raise.
    """

    name = "flaky"

    def __init__(self, failing_batches: set[int] | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.failing_batches = failing_batches or set()
        self.batch_calls: list[int] = []

    async def create_messages_batch(self, messages: Sequence[Message]) -> None:
        self.batch_calls.append(len(messages))
        if len(self.batch_calls) in self.failing_batches:
            raise RuntimeError(f"batch {len(self.batch_calls)} rejected")
        await super().create_messages_batch(messages)


class FailingConnectBackend(InMemoryBackend):
    """Backend whose connect always fails."""

    name = "unreachable"

    async def connect(self) -> None:
        raise ConnectionRefusedError("connection refused")


@pytest_asyncio.fixture
async def memory_backend() -> AsyncGenerator[InMemoryBackend, None]:
    """Connected in-memory backend with a frozen clock."""
    backend = InMemoryBackend(now=lambda: FIXED_NOW)
    await backend.connect()
    yield backend
    await backend.disconnect()


@pytest_asyncio.fixture
async def seeded_backend(
    memory_backend: InMemoryBackend,
    small_workload: GeneratedWorkload,
) -> InMemoryBackend:
    """Connected backend already holding the small workload."""
    await memory_backend.create_sellers_batch(small_workload.sellers)
    await memory_backend.create_buyers_batch(small_workload.buyers)
    await memory_backend.create_conversations_batch(small_workload.conversations)
    await memory_backend.create_messages_batch(small_workload.messages)
    return memory_backend


@pytest.fixture
def mock_backend() -> MagicMock:
    """Create a mock storage backend."""
    backend = MagicMock(spec=StorageBackend)
    backend.name = "mock"

    # Connection methods
    backend.connect = AsyncMock()
    backend.disconnect = AsyncMock()

    # Writes
    backend.create_sellers_batch = AsyncMock()
    backend.create_buyers_batch = AsyncMock()
    backend.create_conversations_batch = AsyncMock()
    backend.create_messages_batch = AsyncMock()
    backend.create_message = AsyncMock()

    # Reads
    backend.get_conversation_messages = AsyncMock(return_value=[])
    backend.get_recent_messages = AsyncMock(return_value=[])
    backend.get_inactive_conversations = AsyncMock(return_value=[])
    backend.search_messages = AsyncMock(return_value=[])

    # Introspection
    backend.health_check = AsyncMock(return_value={"status": "healthy"})
    backend.get_metrics = AsyncMock(
        return_value={"sellers": 0, "buyers": 0, "conversations": 0, "messages": 0}
    )

    backend.batch_writer_for = MagicMock(
        side_effect=lambda entity_type: StorageBackend.batch_writer_for(backend, entity_type)
    )
    return backend


@pytest.fixture
def flaky_backend() -> Any:
    """Factory for in-memory backends whose chosen message batches fail."""

    def factory(failing_batches: set[int] | None = None, **kwargs: Any) -> FlakyBackend:
        return FlakyBackend(failing_batches=failing_batches, now=lambda: FIXED_NOW, **kwargs)

    return factory


@pytest.fixture
def unreachable_backend() -> FailingConnectBackend:
    return FailingConnectBackend()
