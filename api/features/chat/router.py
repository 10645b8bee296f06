"""Router for the Chat feature."""
import logging
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from di.container import ApplicationContainer as DependencyContainer
from api.features.chat.controller import ChatController
from api.features.chat.dtos import ChatRequest, ChatResponse
from api.features.conversation.exceptions import ConversationNotFoundError
from api.shared.auth import AuthenticatedUser, get_optional_user
from api.shared.db import get_db_session

router = APIRouter()
logger = logging.getLogger("rag.chat.router")


@router.post("", response_model=ChatResponse)
@inject
async def chat(
    request: ChatRequest,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Answer a message, storing it in a conversation for signed-in users."""
    try:
        return await controller.chat(request=request, user=user, db_session=db_session)
    except ConversationNotFoundError:
        return JSONResponse(status_code=404, content={"message": "Conversation not found"})
    except Exception:
        logger.exception("Error answering chat message")
        return JSONResponse(
            status_code=500, content={"message": "Error connecting to assistant"}
        )
