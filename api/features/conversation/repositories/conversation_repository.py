"""Conversation repository using base repository pattern."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from api.features.conversation.entities import Conversation
from api.shared.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversations, always scoped by owner."""

    model = Conversation

    async def get_owned(
        self, conversation_id: UUID, user_id: str, *, with_messages: bool = False
    ) -> Optional[Conversation]:
        """Get a conversation only if it belongs to ``user_id``."""
        stmt = select(Conversation).where(
            Conversation.id == conversation_id, Conversation.user_id == user_id
        )
        if with_messages:
            # Refresh a conversation already in the session so new messages show up
            stmt = stmt.options(selectinload(Conversation.messages)).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str, *, limit: int = 100) -> List[Conversation]:
        """User's conversations, most recently active first."""
        return await self.list(limit=limit, order_by="-updated_at", user_id=user_id)
