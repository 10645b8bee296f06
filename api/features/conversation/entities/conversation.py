"""Conversation entity: one chat thread owned by a single user."""
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.shared.entities.base import TimestampedEntity

if TYPE_CHECKING:
    from api.features.conversation.entities.message import Message


class Conversation(TimestampedEntity):
    """Stores a user's chat thread and its latest generated report."""

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    html_report: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    messages: Mapped[List["Message"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_conversation_user_id", "user_id"),
        Index("ix_conversation_updated_at", "updated_at"),
    )
