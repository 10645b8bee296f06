"""Service layer for the Conversation feature.

Every operation is scoped to the calling user: a conversation owned by someone
else is reported exactly like a missing one.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.entities import Conversation, Message, MessageRole
from api.features.conversation.exceptions import (
    ConversationNotFoundError,
    ReportNotAvailableError,
)
from api.features.conversation.repositories.conversation_repository import (
    ConversationRepository,
)
from api.features.conversation.repositories.message_repository import MessageRepository
from api.shared.entities.base import utcnow
from rag.sources import Source, dedupe_sources

logger = logging.getLogger("rag.conversation.service")


class ConversationService:
    """Conversation CRUD plus message append and report storage."""

    def __init__(self, *, default_title: str = "New conversation"):
        self.default_title = default_title

    async def _require(
        self,
        db_session: AsyncSession,
        conversation_id: UUID,
        user_id: str,
        *,
        with_messages: bool = False,
    ) -> Conversation:
        conversation = await ConversationRepository(db_session).get_owned(
            conversation_id, user_id, with_messages=with_messages
        )
        if conversation is None:
            raise ConversationNotFoundError(str(conversation_id))
        return conversation

    async def list_conversations(
        self, *, user_id: str, limit: int, db_session: AsyncSession
    ) -> List[Tuple[Conversation, Optional[Message]]]:
        """User's conversations, most recent first, each with its last message."""
        conversations = await ConversationRepository(db_session).list_for_user(
            user_id, limit=limit
        )
        latest = await MessageRepository(db_session).latest_by_conversation(
            [c.id for c in conversations]
        )
        return [(c, latest.get(c.id)) for c in conversations]

    async def create_conversation(
        self, *, user_id: str, title: Optional[str], db_session: AsyncSession
    ) -> Conversation:
        clean_title = (title or "").strip() or self.default_title
        conversation = await ConversationRepository(db_session).create(
            Conversation(user_id=user_id, title=clean_title)
        )
        await db_session.commit()
        logger.info(f"Conversation created: {conversation.id}")
        return conversation

    async def get_conversation(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> Conversation:
        """Conversation with all of its messages in creation order."""
        return await self._require(
            db_session, conversation_id, user_id, with_messages=True
        )

    async def rename_conversation(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        title: str,
        db_session: AsyncSession,
    ) -> Conversation:
        conversation = await self._require(db_session, conversation_id, user_id)
        conversation.title = title
        conversation.updated_at = utcnow()
        await db_session.commit()
        return conversation

    async def delete_conversation(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> None:
        """Delete a conversation together with all of its messages."""
        conversation = await self._require(
            db_session, conversation_id, user_id, with_messages=True
        )
        await ConversationRepository(db_session).delete(conversation)
        await db_session.commit()
        logger.info(f"Conversation deleted: {conversation_id}")

    async def append_message(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        role: MessageRole | str,
        content: str,
        sources: Optional[Iterable[Source | Dict[str, Any]]] = None,
        db_session: AsyncSession,
    ) -> Message:
        conversation = await self._require(db_session, conversation_id, user_id)
        role_value = MessageRole(role).value
        stored_sources = (
            [s.model_dump() for s in dedupe_sources(sources)]
            if sources is not None
            else None
        )
        message = await MessageRepository(db_session).create(
            Message(
                conversation_id=conversation.id,
                role=role_value,
                content=content,
                sources=stored_sources or None,
            )
        )
        conversation.updated_at = utcnow()
        await db_session.commit()
        return message

    async def recent_messages(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        limit: int,
        db_session: AsyncSession,
    ) -> List[Message]:
        await self._require(db_session, conversation_id, user_id)
        return await MessageRepository(db_session).recent(conversation_id, limit=limit)

    async def save_report(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        html_report: str,
        db_session: AsyncSession,
    ) -> None:
        conversation = await self._require(db_session, conversation_id, user_id)
        conversation.html_report = html_report
        await db_session.commit()

    async def get_report(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> str:
        conversation = await self._require(db_session, conversation_id, user_id)
        if not conversation.html_report:
            raise ReportNotAvailableError(str(conversation_id))
        return conversation.html_report
