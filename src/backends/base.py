"""
Storage Backend Interface.

The capability set a storage engine must provide to be benchmarked.
Concrete adapters wrap a vendor driver; the benchmark engine only ever
talks to this interface.

Adapters must be safe for concurrent use: the concurrency test issues
calls from many virtual users against one adapter instance.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Sequence

from src.workload.models import Buyer, Conversation, EntityType, Message, Seller


class StorageBackend(ABC):
    """Abstract base class for benchmarked storage backends."""

    name: str = "backend"

    @abstractmethod
    async def connect(self) -> None:
        """Open connections. Raises if the backend is unreachable."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connections. Calling it twice is a no-op."""
        pass

    # Batched writes: each call is one unit of work for timing purposes

    @abstractmethod
    async def create_sellers_batch(self, sellers: Sequence[Seller]) -> None:
        pass

    @abstractmethod
    async def create_buyers_batch(self, buyers: Sequence[Buyer]) -> None:
        pass

    @abstractmethod
    async def create_conversations_batch(self, conversations: Sequence[Conversation]) -> None:
        pass

    @abstractmethod
    async def create_messages_batch(self, messages: Sequence[Message]) -> None:
        pass

    @abstractmethod
    async def create_message(self, message: Message) -> None:
        """Insert a single message."""
        pass

    # Reads

    @abstractmethod
    async def get_conversation_messages(
        self, conversation_id: str | None, limit: int = 100
    ) -> list[Message]:
        """Messages of one conversation, oldest first."""
        pass

    @abstractmethod
    async def get_recent_messages(self, minutes: int = 5, limit: int = 1000) -> list[Message]:
        """Messages sent within the last ``minutes``, newest first."""
        pass

    @abstractmethod
    async def get_inactive_conversations(self, minutes: int = 5) -> list[Conversation]:
        """Active conversations with no message in the last ``minutes``."""
        pass

    @abstractmethod
    async def search_messages(self, term: str, limit: int = 100) -> list[Message]:
        """Messages whose text contains ``term``, newest first."""
        pass

    # Introspection

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Return at least {"status": "healthy" | "unhealthy"}."""
        pass

    @abstractmethod
    async def get_metrics(self) -> dict[str, int]:
        """Return record counts keyed by entity type."""
        pass

    def batch_writer_for(
        self, entity_type: EntityType
    ) -> Callable[[Sequence[Any]], Awaitable[None]]:
        """Get the batched-write method for an entity type."""
        return {
            EntityType.SELLERS: self.create_sellers_batch,
            EntityType.BUYERS: self.create_buyers_batch,
            EntityType.CONVERSATIONS: self.create_conversations_batch,
            EntityType.MESSAGES: self.create_messages_batch,
        }[entity_type]
