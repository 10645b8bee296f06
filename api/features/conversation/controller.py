"""Controller for the Conversation feature."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import (
    AppendMessageRequest,
    ConversationDetailDTO,
    ConversationDTO,
    MessageDTO,
    SourceDTO,
)
from api.features.conversation.entities import Conversation, Message
from api.features.conversation.service import ConversationService


def to_message_dto(message: Message) -> MessageDTO:
    return MessageDTO(
        id=message.id,
        conversation_id=message.conversation_id,
        role=message.role,
        content=message.content,
        sources=[SourceDTO(**s) for s in message.sources] if message.sources else None,
        created_at=message.created_at,
    )


def to_conversation_dto(
    conversation: Conversation, last_message: Optional[Message] = None
) -> ConversationDTO:
    return ConversationDTO(
        id=conversation.id,
        title=conversation.title,
        user_id=conversation.user_id,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        has_report=bool(conversation.html_report),
        last_message=to_message_dto(last_message) if last_message else None,
    )


class ConversationController:
    """Controller handling conversation CRUD and message operations."""

    def __init__(self, conversation_service: ConversationService):
        self.conversation_service = conversation_service

    async def list_conversations(
        self, *, user_id: str, limit: int, db_session: AsyncSession
    ) -> List[ConversationDTO]:
        items = await self.conversation_service.list_conversations(
            user_id=user_id, limit=limit, db_session=db_session
        )
        return [to_conversation_dto(c, last) for c, last in items]

    async def create_conversation(
        self, *, user_id: str, title: Optional[str], db_session: AsyncSession
    ) -> ConversationDTO:
        conversation = await self.conversation_service.create_conversation(
            user_id=user_id, title=title, db_session=db_session
        )
        return to_conversation_dto(conversation)

    async def get_conversation(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> ConversationDetailDTO:
        conversation = await self.conversation_service.get_conversation(
            conversation_id=conversation_id, user_id=user_id, db_session=db_session
        )
        messages = [to_message_dto(m) for m in conversation.messages]
        return ConversationDetailDTO(
            **to_conversation_dto(
                conversation, conversation.messages[-1] if conversation.messages else None
            ).model_dump(),
            messages=messages,
        )

    async def rename_conversation(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        title: str,
        db_session: AsyncSession,
    ) -> None:
        await self.conversation_service.rename_conversation(
            conversation_id=conversation_id,
            user_id=user_id,
            title=title,
            db_session=db_session,
        )

    async def delete_conversation(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> None:
        await self.conversation_service.delete_conversation(
            conversation_id=conversation_id, user_id=user_id, db_session=db_session
        )

    async def append_message(
        self,
        *,
        conversation_id: UUID,
        user_id: str,
        request: AppendMessageRequest,
        db_session: AsyncSession,
    ) -> MessageDTO:
        message = await self.conversation_service.append_message(
            conversation_id=conversation_id,
            user_id=user_id,
            role=request.role,
            content=request.content,
            sources=[s.model_dump() for s in request.sources]
            if request.sources is not None
            else None,
            db_session=db_session,
        )
        return to_message_dto(message)

    async def get_report(
        self, *, conversation_id: UUID, user_id: str, db_session: AsyncSession
    ) -> str:
        return await self.conversation_service.get_report(
            conversation_id=conversation_id, user_id=user_id, db_session=db_session
        )
