"""Exceptions raised by the answering pipelines."""
from typing import Any, Dict, Optional

from api.shared.exceptions import ExternalServiceError


class RetrievalError(ExternalServiceError):
    """Raised when the vector index cannot be queried."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("vector-index", message, details)
        self.error_code = "RETRIEVAL_ERROR"


class AssistantError(ExternalServiceError):
    """Raised when the chat model or hosted assistant call fails."""

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details)
        self.error_code = "ASSISTANT_ERROR"
