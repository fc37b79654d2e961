"""
Workload Entity Models.

Defines the chat-commerce entities written to and read from every backend:
sellers, buyers, the conversations between them, and the messages exchanged.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class Platform(str, Enum):
    """Messaging platforms a buyer can reach a seller on."""

    WHATSAPP = "whatsapp"
    INSTAGRAM = "instagram"


class SenderType(str, Enum):
    """Which side of a conversation sent a message."""

    SELLER = "seller"
    BUYER = "buyer"


class MessageType(str, Enum):
    """Message content kinds."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"


class ConversationStatus(str, Enum):
    """Conversation lifecycle states."""

    ACTIVE = "active"
    CLOSED = "closed"
    ARCHIVED = "archived"


class EntityType(str, Enum):
    """Entity collections, in the order they must be written."""

    SELLERS = "sellers"
    BUYERS = "buyers"
    CONVERSATIONS = "conversations"
    MESSAGES = "messages"


class Seller(BaseModel):
    """Seller schema."""

    id: str = Field(..., description="Unique identifier")
    name: str = Field(..., description="Company name")
    email: str = Field(..., description="Contact email")
    phone: str = Field(..., description="Contact phone")
    created_at: datetime = Field(..., description="Account creation time")
    active: bool = Field(default=True, description="Whether the seller is active")


class Buyer(BaseModel):
    """Buyer schema. (platform, platform_id) identifies a buyer externally."""

    id: str = Field(..., description="Unique identifier")
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Contact email")
    phone: str = Field(..., description="Contact phone")
    platform: Platform = Field(..., description="Platform the buyer writes from")
    platform_id: str = Field(..., description="Platform-specific identifier")
    created_at: datetime = Field(..., description="First-seen time")


class Conversation(BaseModel):
    """Conversation between one seller and one buyer on one platform."""

    id: str = Field(..., description="Unique identifier")
    seller_id: str = Field(..., description="Seller ID")
    buyer_id: str = Field(..., description="Buyer ID")
    platform: Platform = Field(..., description="Platform the conversation runs on")
    conversation_id: str = Field(..., description="Platform-specific conversation identifier")
    created_at: datetime = Field(..., description="Conversation start")
    updated_at: datetime = Field(..., description="Last update")
    last_message_at: datetime = Field(..., description="Time of the latest message")
    status: ConversationStatus = Field(default=ConversationStatus.ACTIVE)
    message_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_activity_window(self) -> "Conversation":
        if self.last_message_at < self.created_at:
            raise ValueError("last_message_at must not precede created_at")
        return self


class Message(BaseModel):
    """Message within a conversation."""

    id: str = Field(..., description="Unique identifier")
    conversation_id: str = Field(..., description="Parent conversation ID")
    sender_type: SenderType = Field(..., description="Sender role")
    sender_id: str = Field(..., description="Seller or buyer ID, matching sender_type")
    message_type: MessageType = Field(..., description="Content kind")
    message_text: str = Field(..., description="Text content or media label")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Type-dependent metadata")
    timestamp: datetime = Field(..., description="Send time")
