"""
In-Memory Storage Backend.

Reference adapter storing entities in dictionaries. It implements the full
capability set, including the uniqueness and foreign-key rules the SQL
backends enforce, so the engine can run end to end without a database.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

import structlog

from src.backends.base import StorageBackend
from src.backends.registry import BackendKind, register_backend
from src.workload.models import (
    Buyer,
    Conversation,
    ConversationStatus,
    Message,
    Platform,
    Seller,
)

logger = structlog.get_logger(__name__)


@register_backend(BackendKind.MEMORY)
class InMemoryBackend(StorageBackend):
    """
    Dictionary-backed storage.

    Args:
        latency_seconds: Artificial delay added to every call, to emulate I/O
        now: Clock used by time-window reads
    """

    name = "memory"

    def __init__(
        self,
        latency_seconds: float = 0.0,
        now: Callable[[], datetime] | None = None,
    ):
        self.latency_seconds = latency_seconds
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._connected = False

        self.sellers: dict[str, Seller] = {}
        self.buyers: dict[str, Buyer] = {}
        self.conversations: dict[str, Conversation] = {}
        self.messages: dict[str, Message] = {}

        self._buyer_keys: set[tuple[Platform, str]] = set()
        self._conversation_keys: dict[tuple[str, str, Platform], str] = {}
        self._messages_by_conversation: dict[str, list[Message]] = {}

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        await self._io()
        self._connected = True
        logger.debug("In-memory backend connected")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.debug("In-memory backend disconnected")

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_sellers_batch(self, sellers: Sequence[Seller]) -> None:
        await self._call()
        for seller in sellers:
            self.sellers.setdefault(seller.id, seller)

    async def create_buyers_batch(self, buyers: Sequence[Buyer]) -> None:
        await self._call()
        for buyer in buyers:
            key = (buyer.platform, buyer.platform_id)
            if key in self._buyer_keys or buyer.id in self.buyers:
                continue
            self._buyer_keys.add(key)
            self.buyers[buyer.id] = buyer

    async def create_conversations_batch(self, conversations: Sequence[Conversation]) -> None:
        await self._call()
        for conversation in conversations:
            self._upsert_conversation(conversation)

    async def create_messages_batch(self, messages: Sequence[Message]) -> None:
        await self._call()
        # Validate the whole batch first so a bad batch leaves no partial rows
        for message in messages:
            self._check_conversation(message.conversation_id)
        for message in messages:
            self._insert_message(message)

    async def create_message(self, message: Message) -> None:
        await self._call()
        self._check_conversation(message.conversation_id)
        self._insert_message(message)

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_conversation_messages(
        self, conversation_id: str | None, limit: int = 100
    ) -> list[Message]:
        await self._call()
        messages = self._messages_by_conversation.get(conversation_id or "", [])
        return sorted(messages, key=lambda m: m.timestamp)[:limit]

    async def get_recent_messages(self, minutes: int = 5, limit: int = 1000) -> list[Message]:
        await self._call()
        cutoff = self._now() - timedelta(minutes=minutes)
        recent = [m for m in self.messages.values() if m.timestamp >= cutoff]
        return sorted(recent, key=lambda m: m.timestamp, reverse=True)[:limit]

    async def get_inactive_conversations(self, minutes: int = 5) -> list[Conversation]:
        await self._call()
        cutoff = self._now() - timedelta(minutes=minutes)
        inactive = [
            c for c in self.conversations.values()
            if c.status is ConversationStatus.ACTIVE and c.last_message_at < cutoff
        ]
        return sorted(inactive, key=lambda c: c.last_message_at)

    async def search_messages(self, term: str, limit: int = 100) -> list[Message]:
        await self._call()
        needle = term.lower()
        found = [m for m in self.messages.values() if needle in m.message_text.lower()]
        return sorted(found, key=lambda m: m.timestamp, reverse=True)[:limit]

    # =========================================================================
    # Introspection
    # =========================================================================

    async def health_check(self) -> dict[str, Any]:
        if not self._connected:
            return {"status": "unhealthy", "error": "not connected"}
        return {"status": "healthy", "backend": self.name}

    async def get_metrics(self) -> dict[str, int]:
        return {
            "sellers": len(self.sellers),
            "buyers": len(self.buyers),
            "conversations": len(self.conversations),
            "messages": len(self.messages),
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _io(self) -> None:
        await asyncio.sleep(self.latency_seconds)

    async def _call(self) -> None:
        await self._io()
        self._require_connection()

    def _require_connection(self) -> None:
        if not self._connected:
            raise ConnectionError("in-memory backend is not connected")

    def _upsert_conversation(self, conversation: Conversation) -> None:
        if conversation.seller_id not in self.sellers:
            raise ValueError(f"unknown seller {conversation.seller_id}")
        if conversation.buyer_id not in self.buyers:
            raise ValueError(f"unknown buyer {conversation.buyer_id}")

        key = (conversation.seller_id, conversation.buyer_id, conversation.platform)
        existing_id = self._conversation_keys.get(key)
        if existing_id is None:
            self._conversation_keys[key] = conversation.id
            self.conversations[conversation.id] = conversation
            return

        self.conversations[existing_id] = self.conversations[existing_id].model_copy(
            update={
                "last_message_at": conversation.last_message_at,
                "status": conversation.status,
                "message_count": conversation.message_count,
            }
        )

    def _check_conversation(self, conversation_id: str) -> None:
        if conversation_id not in self.conversations:
            raise ValueError(f"unknown conversation {conversation_id}")

    def _insert_message(self, message: Message) -> None:
        if message.id in self.messages:
            return
        self.messages[message.id] = message
        self._messages_by_conversation.setdefault(message.conversation_id, []).append(message)
