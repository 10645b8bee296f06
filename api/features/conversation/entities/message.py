"""Message entity: an append-only turn inside a conversation."""
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.shared.entities.base import BaseEntity

if TYPE_CHECKING:
    from api.features.conversation.entities.conversation import Conversation


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseEntity):
    """Stores one chat turn with the article citations behind it."""

    conversation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("conversation.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # [{"title": ..., "link": ...}], deduplicated by link
    sources: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(
        JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")
    )

    # Relationships
    conversation: Mapped["Conversation"] = relationship(back_populates="messages")

    __table_args__ = (
        Index("ix_message_conversation_id", "conversation_id"),
        Index("ix_message_created_at", "created_at"),
    )
