"""Exception hierarchy shared by the API, the answering pipelines and ingestion."""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception carrying a machine-readable code and details."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(AppException):
    """A resource is missing, or is not visible to the caller."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} '{identifier}' not found",
            "NOT_FOUND",
            {"resource": resource, "identifier": identifier},
        )


class ExternalServiceError(AppException):
    """A call to a managed service (model, index, assistant) failed."""

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(
            f"{service} service error: {message}",
            "EXTERNAL_SERVICE_ERROR",
            {"service": service, **(details or {})},
        )
