"""Conversation entities."""
from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message, MessageRole

__all__ = ["Conversation", "Message", "MessageRole"]
