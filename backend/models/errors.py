"""Error taxonomy shared by the memory services and the chat session."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ErrorDetail:
    """Structured error information attached to service exceptions."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class MemoryServiceError(Exception):
    """Base exception for ingestion and retrieval failures."""

    code = "MEMORY_SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.error = ErrorDetail(code=self.code, message=message, details=details or {})
        super().__init__(message)


class BackendUnavailable(MemoryServiceError):
    """The model server or the vector database could not serve a request."""

    code = "BACKEND_UNAVAILABLE"


class InvalidInput(MemoryServiceError):
    """A file path or question that cannot be processed."""

    code = "INVALID_INPUT"


class InvalidArgument(ValueError):
    """Raised for argument values a caller must never pass."""
