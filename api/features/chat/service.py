"""Service layer for the Chat feature.

Runs the configured answering pipeline and, for signed-in users, stores both
turns in a conversation and refreshes its HTML report.
"""
import logging
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.entities import Conversation, MessageRole
from api.features.conversation.service import ConversationService
from rag.history import ChatTurn, normalize_history
from rag.pipeline.base import ChatAnswer, ChatPipeline
from rag.report.html_report import ReportGenerator

logger = logging.getLogger("rag.chat.service")


def title_from_message(message: str, max_length: int) -> str:
    """Conversation title derived from its first message."""
    title = " ".join(message.split())
    if len(title) <= max_length:
        return title
    return title[: max_length - 3].rstrip() + "..."


class ChatService:
    """Answers chat messages and persists them for authenticated users."""

    def __init__(
        self,
        *,
        pipeline: ChatPipeline,
        conversation_service: ConversationService,
        report_generator: Optional[ReportGenerator] = None,
        history_turns: int = 10,
        title_max_length: int = 60,
    ):
        self.pipeline = pipeline
        self.conversation_service = conversation_service
        self.report_generator = report_generator
        self.history_turns = history_turns
        self.title_max_length = title_max_length

    def _history(self, history: Optional[Sequence[Any]]) -> List[ChatTurn]:
        return normalize_history(history, self.history_turns)

    async def answer(
        self, *, message: str, history: Optional[Sequence[Any]] = None
    ) -> ChatAnswer:
        """Answer without touching storage (anonymous callers)."""
        return await self.pipeline.answer(question=message, history=self._history(history))

    async def _resolve_conversation(
        self,
        *,
        user_id: str,
        conversation_id: Optional[UUID],
        message: str,
        db_session: AsyncSession,
    ) -> Conversation:
        if conversation_id is not None:
            return await self.conversation_service.get_conversation(
                conversation_id=conversation_id, user_id=user_id, db_session=db_session
            )
        return await self.conversation_service.create_conversation(
            user_id=user_id,
            title=title_from_message(message, self.title_max_length),
            db_session=db_session,
        )

    async def chat(
        self,
        *,
        user_id: str,
        message: str,
        history: Optional[Sequence[Any]] = None,
        conversation_id: Optional[UUID] = None,
        db_session: AsyncSession,
    ) -> tuple[ChatAnswer, UUID]:
        """Answer a message inside a stored conversation.

        Returns the answer and the id of the conversation the exchange was
        stored in (created on the fly when ``conversation_id`` is omitted).
        """
        conversation = await self._resolve_conversation(
            user_id=user_id,
            conversation_id=conversation_id,
            message=message,
            db_session=db_session,
        )
        conversation_id = conversation.id
        if history is None:
            history = await self.conversation_service.recent_messages(
                conversation_id=conversation_id,
                user_id=user_id,
                limit=self.history_turns,
                db_session=db_session,
            )

        result = await self.pipeline.answer(
            question=message, history=self._history(history)
        )

        await self.conversation_service.append_message(
            conversation_id=conversation_id,
            user_id=user_id,
            role=MessageRole.USER,
            content=message,
            db_session=db_session,
        )
        await self.conversation_service.append_message(
            conversation_id=conversation_id,
            user_id=user_id,
            role=MessageRole.ASSISTANT,
            content=result.answer,
            sources=result.sources,
            db_session=db_session,
        )
        logger.info(
            f"Chat turn stored in conversation {conversation_id} "
            f"({len(result.sources)} sources, mode={self.pipeline.mode})"
        )

        await self._refresh_report(
            conversation_id=conversation_id, user_id=user_id, db_session=db_session
        )
        return result, conversation_id

    async def _refresh_report(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> None:
        if self.report_generator is None:
            return
        try:
            conversation = await self.conversation_service.get_conversation(
                conversation_id=conversation_id, user_id=user_id, db_session=db_session
            )
            html_report = await self.report_generator.generate(
                title=conversation.title, messages=conversation.messages
            )
            await self.conversation_service.save_report(
                conversation_id=conversation_id,
                user_id=user_id,
                html_report=html_report,
                db_session=db_session,
            )
        except Exception:
            logger.exception(f"Report generation failed for conversation {conversation_id}")
            await db_session.rollback()

