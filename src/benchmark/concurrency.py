"""
Concurrency Harness.

Simulates concurrent virtual users issuing a mixed read/write load against
one backend. Each user runs its operations strictly in sequence; users run
concurrently with each other via asyncio.gather and share the adapter.
"""

import asyncio
import random
from typing import Sequence

import structlog

from src.backends.base import StorageBackend
from src.benchmark.clock import Clock, MonotonicClock, elapsed_ms
from src.benchmark.metrics import ConcurrencyResult, VirtualUserResult
from src.workload.generator import EntityGenerator
from src.workload.models import Conversation

logger = structlog.get_logger(__name__)

DEFAULT_READ_PROBABILITY = 0.7


class ConcurrencyHarness:
    """
    Runs concurrent virtual users and aggregates their results.

    Args:
        generator: Synthesises the messages users write
        clock: Time source for latencies and the overall span
        call_timeout: Deadline for each adapter call, in seconds
        read_probability: Chance that an operation is a read
        rng: Source for per-user random streams
    """

    def __init__(
        self,
        generator: EntityGenerator,
        clock: Clock | None = None,
        call_timeout: float = 30.0,
        read_probability: float = DEFAULT_READ_PROBABILITY,
        rng: random.Random | None = None,
    ):
        if not 0.0 <= read_probability <= 1.0:
            raise ValueError("read_probability must be between 0 and 1")

        self.generator = generator
        self.clock = clock or MonotonicClock()
        self.call_timeout = call_timeout
        self.read_probability = read_probability
        self.rng = rng or generator.rng

    async def run(
        self,
        backend: StorageBackend,
        conversations: Sequence[Conversation],
        concurrent_users: int,
        ops_per_user: int,
        messages_limit: int = 100,
    ) -> ConcurrencyResult:
        """
        Run concurrent_users users of ops_per_user operations each.

        Every planned operation is counted, successful or not, so the total
        always equals concurrent_users * ops_per_user.
        """
        if concurrent_users < 0 or ops_per_user < 0:
            raise ValueError("concurrent_users and ops_per_user must be non-negative")

        result = ConcurrencyResult(concurrent_users=concurrent_users, ops_per_user=ops_per_user)
        conversations = list(conversations)

        logger.info(
            "Starting concurrency test",
            users=concurrent_users,
            ops_per_user=ops_per_user,
            conversations=len(conversations),
        )

        # Derive user streams up front so the draw order does not depend on scheduling
        user_rngs = [random.Random(self.rng.getrandbits(64)) for _ in range(concurrent_users)]

        start = self.clock.now()
        users = await asyncio.gather(
            *(
                self._run_user(
                    user_id, backend, conversations, ops_per_user, messages_limit, user_rngs[user_id]
                )
                for user_id in range(concurrent_users)
            )
        )

        result.users = list(users)
        finished = [u.completed_at for u in result.users if u.completed_at is not None]
        result.duration_ms = (max(finished) - start) * 1000 if finished else 0.0

        logger.info(
            "Concurrency test completed",
            total_operations=result.total_operations,
            errors=result.total_errors,
            ops_per_second=round(result.ops_per_second, 2),
            error_rate=round(result.error_rate, 4),
        )
        return result

    async def _run_user(
        self,
        user_id: int,
        backend: StorageBackend,
        conversations: list[Conversation],
        ops_per_user: int,
        messages_limit: int,
        rng: random.Random,
    ) -> VirtualUserResult:
        user = VirtualUserResult(user_id=user_id)

        for _ in range(ops_per_user):
            is_read = rng.random() < self.read_probability
            conversation = rng.choice(conversations) if conversations else None

            user.operations += 1
            if is_read:
                user.reads += 1
            else:
                user.writes += 1

            started = self.clock.now()
            try:
                if is_read:
                    await asyncio.wait_for(
                        backend.get_conversation_messages(
                            conversation.id if conversation else None, limit=messages_limit
                        ),
                        timeout=self.call_timeout,
                    )
                else:
                    if conversation is None:
                        raise LookupError("no conversation to write to")
                    message = self.generator.generate_message(conversation)
                    await asyncio.wait_for(
                        backend.create_message(message), timeout=self.call_timeout
                    )
            except asyncio.TimeoutError:
                user.errors += 1
                logger.debug("Virtual user operation timed out", user_id=user_id, read=is_read)
            except Exception as e:
                user.errors += 1
                logger.debug("Virtual user operation failed", user_id=user_id, read=is_read, error=str(e))
            else:
                user.latencies_ms.append(elapsed_ms(self.clock, started))

        user.completed_at = self.clock.now()
        return user
