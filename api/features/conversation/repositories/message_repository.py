"""Message repository using base repository pattern."""
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy import and_, func, select

from api.features.conversation.entities import Message
from api.shared.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for append-only conversation messages."""

    model = Message

    async def recent(self, conversation_id: UUID, *, limit: int = 10) -> List[Message]:
        """Last ``limit`` messages of a conversation in chronological order."""
        entities = await self.list(
            limit=limit, order_by="-created_at", conversation_id=conversation_id
        )
        return list(reversed(entities))

    async def latest_by_conversation(
        self, conversation_ids: Sequence[UUID]
    ) -> Dict[UUID, Message]:
        """Most recent message of each conversation that has any."""
        if not conversation_ids:
            return {}
        latest = (
            select(
                Message.conversation_id,
                func.max(Message.created_at).label("latest_at"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .group_by(Message.conversation_id)
            .subquery()
        )
        stmt = select(Message).join(
            latest,
            and_(
                Message.conversation_id == latest.c.conversation_id,
                Message.created_at == latest.c.latest_at,
            ),
        )
        result = await self.session.execute(stmt)
        return {m.conversation_id: m for m in result.scalars().all()}
