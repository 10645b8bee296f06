"""Router for the Conversation feature."""
import logging
from typing import List
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from di.container import ApplicationContainer as DependencyContainer
from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import (
    AppendMessageRequest,
    ConversationDetailDTO,
    ConversationDTO,
    CreateConversationRequest,
    MessageDTO,
    UpdateConversationRequest,
)
from api.features.conversation.exceptions import (
    ConversationNotFoundError,
    ReportNotAvailableError,
)
from api.shared.auth import AuthenticatedUser, get_current_user
from api.shared.db import get_db_session
from api.shared.dtos import SuccessResponse

router = APIRouter()
logger = logging.getLogger("rag.conversation.router")


@router.get("", response_model=List[ConversationDTO])
@inject
async def list_conversations(
    limit: int = Query(100, ge=1, le=500),
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        return await controller.list_conversations(
            user_id=user.id, limit=limit, db_session=db_session
        )
    except Exception:
        logger.exception("Error fetching conversations")
        raise HTTPException(status_code=500, detail="Error fetching conversations")


@router.post("", response_model=ConversationDTO)
@inject
async def create_conversation(
    request: CreateConversationRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        return await controller.create_conversation(
            user_id=user.id, title=request.title, db_session=db_session
        )
    except Exception:
        logger.exception("Error creating conversation")
        raise HTTPException(status_code=500, detail="Error creating conversation")


@router.get("/{conversation_id}", response_model=ConversationDetailDTO)
@inject
async def get_conversation(
    conversation_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        return await controller.get_conversation(
            conversation_id=conversation_id, user_id=user.id, db_session=db_session
        )
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception:
        logger.exception("Error fetching conversation")
        raise HTTPException(status_code=500, detail="Error fetching conversation")


@router.patch("/{conversation_id}", response_model=SuccessResponse)
@inject
async def rename_conversation(
    conversation_id: UUID,
    request: UpdateConversationRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        await controller.rename_conversation(
            conversation_id=conversation_id,
            user_id=user.id,
            title=request.title,
            db_session=db_session,
        )
        return SuccessResponse()
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception:
        logger.exception("Error updating conversation")
        raise HTTPException(status_code=500, detail="Error updating conversation")


@router.delete("/{conversation_id}", response_model=SuccessResponse)
@inject
async def delete_conversation(
    conversation_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        await controller.delete_conversation(
            conversation_id=conversation_id, user_id=user.id, db_session=db_session
        )
        return SuccessResponse()
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception:
        logger.exception("Error deleting conversation")
        raise HTTPException(status_code=500, detail="Error deleting conversation")


@router.post("/{conversation_id}/messages", response_model=MessageDTO)
@inject
async def append_message(
    conversation_id: UUID,
    request: AppendMessageRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        return await controller.append_message(
            conversation_id=conversation_id,
            user_id=user.id,
            request=request,
            db_session=db_session,
        )
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception:
        logger.exception("Error saving message")
        raise HTTPException(status_code=500, detail="Error saving message")


@router.get("/{conversation_id}/report", response_class=HTMLResponse)
@inject
async def get_report(
    conversation_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    try:
        html_report = await controller.get_report(
            conversation_id=conversation_id, user_id=user.id, db_session=db_session
        )
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except ReportNotAvailableError:
        raise HTTPException(status_code=404, detail="No report available")
    except Exception:
        logger.exception("Error getting HTML report")
        raise HTTPException(status_code=500, detail="Error getting report")
    return HTMLResponse(content=html_report)
