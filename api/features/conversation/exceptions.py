"""Exceptions for the Conversation feature."""
from api.shared.exceptions import AppException, NotFoundError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation does not exist or belongs to another user."""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", conversation_id)
        self.error_code = "CONVERSATION_NOT_FOUND"


class ReportNotAvailableError(AppException):
    """Raised when a conversation has no generated report yet."""

    def __init__(self, conversation_id: str):
        message = f"No report available for conversation '{conversation_id}'"
        super().__init__(message, "REPORT_NOT_AVAILABLE", {"conversation_id": conversation_id})
