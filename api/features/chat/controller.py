"""Controller for the Chat feature."""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.chat.dtos import ChatRequest, ChatResponse
from api.features.chat.service import ChatService
from api.features.conversation.dtos import SourceDTO
from api.shared.auth import AuthenticatedUser


class ChatController:
    """Controller mapping chat requests onto the chat service."""

    def __init__(self, chat_service: ChatService):
        self.chat_service = chat_service

    async def chat(
        self,
        *,
        request: ChatRequest,
        user: Optional[AuthenticatedUser],
        db_session: AsyncSession,
    ) -> ChatResponse:
        if user is None:
            result = await self.chat_service.answer(
                message=request.message, history=request.history
            )
            conversation_id = None
        else:
            result, conversation_id = await self.chat_service.chat(
                user_id=user.id,
                message=request.message,
                history=request.history,
                conversation_id=request.conversation_id,
                db_session=db_session,
            )
        return ChatResponse(
            message=result.answer,
            sources=[SourceDTO(title=s.title, link=s.link) for s in result.sources],
            conversation_id=conversation_id,
        )
