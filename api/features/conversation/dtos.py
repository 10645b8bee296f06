"""DTOs for the Conversation feature."""
from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator

from api.shared.dtos import BaseDTO


class SourceDTO(BaseDTO):
    """Article citation attached to an assistant message."""

    title: str = Field(description="Article title")
    link: str = Field(description="Article link")


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    id: UUID = Field(description="Message identifier")
    conversation_id: UUID = Field(alias="conversationId", description="Owning conversation")
    role: str = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")
    sources: Optional[List[SourceDTO]] = Field(default=None, description="Cited articles")
    created_at: datetime = Field(alias="createdAt", description="Creation timestamp")


class ConversationDTO(BaseDTO):
    """Conversation summary DTO."""

    id: UUID = Field(description="Conversation identifier")
    title: str = Field(description="Conversation title")
    user_id: str = Field(alias="userId", description="Owning user")
    created_at: datetime = Field(alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(alias="updatedAt", description="Last activity timestamp")
    has_report: bool = Field(default=False, alias="hasReport", description="Whether an HTML report exists")
    last_message: Optional[MessageDTO] = Field(
        default=None, alias="lastMessage", description="Most recent message, if any"
    )


class ConversationDetailDTO(ConversationDTO):
    """Conversation with its full message history."""

    messages: List[MessageDTO] = Field(default_factory=list, description="Messages in chronological order")


class CreateConversationRequest(BaseDTO):
    """Request to create a conversation."""

    title: Optional[str] = Field(default=None, max_length=500, description="Conversation title")


class UpdateConversationRequest(BaseDTO):
    """Rename a conversation."""

    title: str = Field(min_length=1, max_length=500, description="New conversation title")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class AppendMessageRequest(BaseDTO):
    """Append a message to a conversation."""

    role: Literal["user", "assistant"] = Field(description="Message role: user or assistant")
    content: str = Field(min_length=1, description="Message content")
    sources: Optional[List[SourceDTO]] = Field(default=None, description="Cited articles")
