"""
Synthetic Workload Generator.

Produces sellers, buyers, conversations and messages whose references are
consistent with each other:
- every conversation joins an existing seller and buyer
- (seller, buyer, platform) is unique within a workload
- message senders belong to the parent conversation
- message timestamps fall inside the conversation's activity window

All randomness is drawn from one injected ``random.Random`` which is shared
with Faker, so a seeded source reproduces a workload exactly.
"""

import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import structlog
from faker import Faker

from src.workload.models import (
    Buyer,
    Conversation,
    ConversationStatus,
    EntityType,
    Message,
    MessageType,
    Platform,
    Seller,
    SenderType,
)
from src.workload.scenarios import WorkloadScenario

logger = structlog.get_logger(__name__)

# Spread of message timestamps around their slot, as a fraction of slot width
SLOT_JITTER = 0.3

CONVERSATION_WINDOW = timedelta(days=3)
SELLER_HISTORY = timedelta(days=2 * 365)
BUYER_HISTORY = timedelta(days=365)
RECEIPT_WINDOW = timedelta(days=1)

MEDIA_LABELS = {
    MessageType.IMAGE: "📷 Image",
    MessageType.AUDIO: "🎵 Audio message",
    MessageType.VIDEO: "🎥 Video",
}


@dataclass
class GeneratedWorkload:
    """Entities generated for one benchmark run."""

    sellers: list[Seller] = field(default_factory=list)
    buyers: list[Buyer] = field(default_factory=list)
    conversations: list[Conversation] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)

    def entities(self, entity_type: EntityType) -> list[Any]:
        return getattr(self, entity_type.value)

    def summary(self) -> dict[str, Any]:
        platforms = Counter(b.platform.value for b in self.buyers)
        return {
            "sellers": len(self.sellers),
            "buyers": len(self.buyers),
            "conversations": len(self.conversations),
            "messages": len(self.messages),
            "platforms": {p.value: platforms.get(p.value, 0) for p in Platform},
        }


class EntityGenerator:
    """
    Generates referentially consistent chat-commerce entities.

    Example:
        generator = EntityGenerator(rng=random.Random(42))
        workload = generator.generate(get_scenario("custom"))
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        now: Callable[[], datetime] | None = None,
        locale: str = "en_US",
    ):
        self.rng = rng or random.Random()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.faker = Faker(locale)
        self.faker.random = self.rng

    @classmethod
    def seeded(cls, seed: int | None, **kwargs: Any) -> "EntityGenerator":
        """Create a generator whose output is reproducible for a given seed."""
        return cls(rng=random.Random(seed), **kwargs)

    # =========================================================================
    # Full workload
    # =========================================================================

    def generate(self, scenario: WorkloadScenario) -> GeneratedWorkload:
        """
        Generate the complete entity set for a scenario.

        Never fails: zero counts yield empty collections, and a buyer pool
        smaller than conversations_per_seller yields fewer conversations.
        """
        now = self._now()

        sellers = self.generate_sellers(scenario.sellers, now=now)
        buyers = self.generate_buyers(scenario.buyers, scenario.platform_split, now=now)
        conversations = self.generate_conversations(
            sellers, buyers, scenario.conversations_per_seller, now=now
        )
        messages = self.generate_messages(
            conversations, scenario.messages_per_conversation, now=now
        )

        workload = GeneratedWorkload(
            sellers=sellers,
            buyers=buyers,
            conversations=conversations,
            messages=messages,
        )

        logger.info("Workload generated", scenario=scenario.name, **workload.summary())
        return workload

    # =========================================================================
    # Sellers and buyers
    # =========================================================================

    def generate_seller(self, now: datetime | None = None) -> Seller:
        now = now or self._now()
        return Seller(
            id=self.faker.uuid4(),
            name=self.faker.company(),
            email=self.faker.email(),
            phone=self.faker.phone_number(),
            created_at=self._past(now, SELLER_HISTORY),
            active=self.faker.boolean(chance_of_getting_true=80),
        )

    def generate_sellers(self, count: int, now: datetime | None = None) -> list[Seller]:
        now = now or self._now()
        return [self.generate_seller(now) for _ in range(count)]

    def generate_buyer(
        self,
        platform: Platform,
        now: datetime | None = None,
        taken_ids: set[tuple[Platform, str]] | None = None,
    ) -> Buyer:
        now = now or self._now()
        platform_id = self._unique_platform_id(platform, taken_ids)
        return Buyer(
            id=self.faker.uuid4(),
            name=self.faker.name(),
            email=self.faker.email(),
            phone=self.faker.phone_number(),
            platform=platform,
            platform_id=platform_id,
            created_at=self._past(now, BUYER_HISTORY),
        )

    def generate_buyers(
        self,
        count: int,
        platform_split: dict[Platform, float],
        now: datetime | None = None,
    ) -> list[Buyer]:
        """
        Generate buyers split across platforms.

        WhatsApp receives floor(count * share); Instagram takes the remainder.
        """
        now = now or self._now()
        whatsapp_count = int(count * platform_split.get(Platform.WHATSAPP, 0.0))
        counts = {
            Platform.WHATSAPP: whatsapp_count,
            Platform.INSTAGRAM: count - whatsapp_count,
        }

        taken: set[tuple[Platform, str]] = set()
        buyers: list[Buyer] = []
        for platform, platform_count in counts.items():
            for _ in range(platform_count):
                buyers.append(self.generate_buyer(platform, now=now, taken_ids=taken))
        return buyers

    # =========================================================================
    # Conversations
    # =========================================================================

    def generate_conversation(
        self,
        seller: Seller,
        buyer: Buyer,
        now: datetime | None = None,
    ) -> Conversation:
        now = now or self._now()
        created_at = self._past(now, CONVERSATION_WINDOW)
        last_message_at = created_at + (now - created_at) * self.rng.random()

        return Conversation(
            id=self.faker.uuid4(),
            seller_id=seller.id,
            buyer_id=buyer.id,
            platform=buyer.platform,
            conversation_id=self._platform_id(buyer.platform),
            created_at=created_at,
            updated_at=last_message_at,
            last_message_at=last_message_at,
            status=self.rng.choice(list(ConversationStatus)),
            message_count=self.rng.randint(1, 500),
        )

    def generate_conversations(
        self,
        sellers: list[Seller],
        buyers: list[Buyer],
        conversations_per_seller: int,
        now: datetime | None = None,
    ) -> list[Conversation]:
        """
        Fan each seller out to a shuffled sample of buyers.

        Tuples already emitted are skipped, so a seller gets fewer than
        conversations_per_seller conversations when the pool runs out.
        """
        now = now or self._now()
        conversations: list[Conversation] = []
        seen: set[tuple[str, str, Platform]] = set()

        for seller in sellers:
            pool = list(buyers)
            self.rng.shuffle(pool)
            created = 0

            for buyer in pool:
                if created >= conversations_per_seller:
                    break
                key = (seller.id, buyer.id, buyer.platform)
                if key in seen:
                    continue
                seen.add(key)
                conversations.append(self.generate_conversation(seller, buyer, now=now))
                created += 1

            if created < conversations_per_seller:
                logger.debug(
                    "Buyer pool exhausted",
                    seller_id=seller.id,
                    requested=conversations_per_seller,
                    created=created,
                )

        return conversations

    # =========================================================================
    # Messages
    # =========================================================================

    def generate_message(
        self,
        conversation: Conversation,
        timestamp: datetime | None = None,
        now: datetime | None = None,
    ) -> Message:
        """Generate one message sent by either side of a conversation."""
        now = now or self._now()
        sender_type = self.rng.choice(list(SenderType))
        sender_id = (
            conversation.seller_id if sender_type is SenderType.SELLER else conversation.buyer_id
        )
        message_type = self.rng.choice(list(MessageType))

        return Message(
            id=self.faker.uuid4(),
            conversation_id=conversation.id,
            sender_type=sender_type,
            sender_id=sender_id,
            message_type=message_type,
            message_text=self._message_text(message_type),
            metadata=self._message_metadata(message_type, now),
            timestamp=timestamp or now,
        )

    def generate_conversation_messages(
        self,
        conversation: Conversation,
        count: int,
        now: datetime | None = None,
    ) -> list[Message]:
        now = now or self._now()
        timestamps = self.distributed_timestamps(
            conversation.created_at, conversation.last_message_at, count
        )
        messages = [
            self.generate_message(conversation, timestamp=ts, now=now) for ts in timestamps
        ]
        return sorted(messages, key=lambda m: m.timestamp)

    def generate_messages(
        self,
        conversations: list[Conversation],
        messages_per_conversation: int,
        now: datetime | None = None,
    ) -> list[Message]:
        now = now or self._now()
        messages: list[Message] = []
        for conversation in conversations:
            messages.extend(
                self.generate_conversation_messages(conversation, messages_per_conversation, now=now)
            )
        return messages

    def generate_benchmark_messages(
        self,
        conversations: list[Conversation],
        count: int,
        now: datetime | None = None,
    ) -> list[Message]:
        """
        Generate count messages for the single-insert benchmark.

        Each message goes to a randomly chosen existing conversation and is
        tagged with ``{"benchmark": True}`` in its metadata.

        Raises:
            LookupError: If there are no conversations to write into
        """
        if not conversations:
            raise LookupError("no conversations to insert messages into")

        messages = []
        for _ in range(count):
            message = self.generate_message(self.rng.choice(conversations), now=now)
            messages.append(
                message.model_copy(update={"metadata": {**message.metadata, "benchmark": True}})
            )
        return messages

    def distributed_timestamps(
        self,
        start: datetime,
        end: datetime,
        count: int,
    ) -> list[datetime]:
        """
        Spread count timestamps across [start, end].

        The window is cut into equal slots; each slot's base time is moved
        by up to SLOT_JITTER of the slot width and clamped into the window.
        """
        if count <= 0:
            return []

        width = (end - start) / count
        timestamps = []
        for i in range(count):
            offset = width * self.rng.uniform(-SLOT_JITTER, SLOT_JITTER)
            ts = start + width * i + offset
            timestamps.append(min(max(ts, start), end))

        return sorted(timestamps)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _past(self, now: datetime, window: timedelta) -> datetime:
        return now - window * self.rng.random()

    def _platform_id(self, platform: Platform) -> str:
        if platform is Platform.WHATSAPP:
            return f"{self.faker.msisdn()}@c.us"
        return self.faker.user_name()

    def _unique_platform_id(
        self,
        platform: Platform,
        taken: set[tuple[Platform, str]] | None,
    ) -> str:
        platform_id = self._platform_id(platform)
        if taken is None:
            return platform_id

        attempt = 0
        while (platform, platform_id) in taken:
            attempt += 1
            platform_id = self._platform_id(platform)
            if attempt >= 5:
                platform_id = f"{platform_id}{self.rng.randint(1000, 999999)}"
        taken.add((platform, platform_id))
        return platform_id

    def _message_text(self, message_type: MessageType) -> str:
        if message_type is MessageType.TEXT:
            return " ".join(self.faker.sentences(nb=self.rng.randint(1, 3)))
        if message_type is MessageType.DOCUMENT:
            return f"📄 {self.faker.file_name()}"
        return MEDIA_LABELS[message_type]

    def _message_metadata(self, message_type: MessageType, now: datetime) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "delivered": self.faker.boolean(chance_of_getting_true=95),
            "read": self.faker.boolean(chance_of_getting_true=80),
            "timestamp_delivered": self._past(now, RECEIPT_WINDOW),
            "timestamp_read": self._past(now, RECEIPT_WINDOW),
        }

        if message_type is MessageType.IMAGE:
            metadata.update(
                file_size=self.rng.randint(100_000, 5_000_000),
                width=self.rng.randint(480, 1920),
                height=self.rng.randint(480, 1080),
                format=self.rng.choice(["jpg", "png", "gif"]),
            )
        elif message_type is MessageType.AUDIO:
            metadata.update(
                duration=self.rng.randint(1, 300),
                file_size=self.rng.randint(50_000, 2_000_000),
                format="ogg",
            )
        elif message_type is MessageType.VIDEO:
            metadata.update(
                duration=self.rng.randint(5, 600),
                file_size=self.rng.randint(1_000_000, 50_000_000),
                width=self.rng.randint(480, 1920),
                height=self.rng.randint(480, 1080),
                format="mp4",
            )
        elif message_type is MessageType.DOCUMENT:
            metadata.update(
                file_size=self.rng.randint(10_000, 10_000_000),
                file_name=self.faker.file_name(),
                mime_type=self.faker.mime_type(),
            )

        return metadata
