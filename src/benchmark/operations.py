"""
Benchmark Operations.

Named read operations timed by the Phase Runner, plus the single-insert
write operation. Each read takes the backend and a ``ReadContext`` holding
the generated conversations and the read parameters.
"""

import random
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Awaitable, Callable

from src.backends.base import StorageBackend
from src.config.settings import ReadSettings
from src.workload.generator import EntityGenerator
from src.workload.models import Conversation

ReadOperation = Callable[[StorageBackend, "ReadContext"], Awaitable[Any]]


@dataclass
class ReadContext:
    """Inputs shared by the read operations of one backend run."""

    conversations: list[Conversation] = field(default_factory=list)
    settings: ReadSettings = field(default_factory=ReadSettings)
    rng: random.Random = field(default_factory=random.Random)

    def random_conversation_id(self) -> str | None:
        if not self.conversations:
            return None
        return self.rng.choice(self.conversations).id


async def conversation_messages(backend: StorageBackend, context: ReadContext) -> Any:
    return await backend.get_conversation_messages(
        context.random_conversation_id(), limit=context.settings.messages_limit
    )


async def recent_messages(backend: StorageBackend, context: ReadContext) -> Any:
    return await backend.get_recent_messages(
        minutes=context.settings.recent_minutes, limit=context.settings.recent_limit
    )


async def inactive_conversations(backend: StorageBackend, context: ReadContext) -> Any:
    return await backend.get_inactive_conversations(minutes=context.settings.inactive_minutes)


async def search_messages(backend: StorageBackend, context: ReadContext) -> Any:
    return await backend.search_messages(
        context.settings.search_term, limit=context.settings.search_limit
    )


READ_OPERATIONS: dict[str, ReadOperation] = {
    "conversation_messages": conversation_messages,
    "recent_messages": recent_messages,
    "inactive_conversations": inactive_conversations,
    "search_messages": search_messages,
}


def bind_read(operation: ReadOperation, context: ReadContext) -> Callable[[StorageBackend], Awaitable[Any]]:
    """Bind a read operation to its context so it takes only the backend."""
    return partial(operation, context=context)


class MessageInserts:
    """
    Inserts ``count`` freshly generated messages one call at a time.

    Messages are generated inside the operation, so every invocation writes
    new rows and generation time is part of the measured latency.
    """

    name = "message_inserts"

    def __init__(
        self,
        generator: EntityGenerator,
        conversations: list[Conversation],
        count: int,
    ):
        self.generator = generator
        self.conversations = conversations
        self.count = count

    async def __call__(self, backend: StorageBackend) -> None:
        messages = self.generator.generate_benchmark_messages(self.conversations, self.count)
        for message in messages:
            await backend.create_message(message)
