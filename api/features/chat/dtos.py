"""DTOs for the Chat feature."""
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from api.features.conversation.dtos import SourceDTO
from api.shared.dtos import BaseDTO


class HistoryItem(BaseDTO):
    """One prior turn sent by the client."""

    role: str = Field(default="", description="Turn role; unknown roles are ignored")
    content: str = Field(default="", description="Turn content")


class ChatRequest(BaseDTO):
    """Chat message, optionally continuing a stored conversation."""

    message: str = Field(min_length=1, description="User question")
    history: Optional[List[HistoryItem]] = Field(
        default=None, description="Prior turns; stored history is used when omitted"
    )
    conversation_id: Optional[UUID] = Field(
        default=None, alias="conversationId", description="Conversation to continue"
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v.strip()


class ChatResponse(BaseDTO):
    """Assistant answer with the articles it drew on."""

    message: str = Field(description="Assistant answer")
    sources: List[SourceDTO] = Field(default_factory=list, description="Cited articles")
    conversation_id: Optional[UUID] = Field(
        default=None, alias="conversationId", description="Conversation the turn was stored in"
    )
