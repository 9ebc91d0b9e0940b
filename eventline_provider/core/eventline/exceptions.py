"""Eventline-specific exceptions for error handling."""
from __future__ import annotations

from typing import Optional


class EventlineError(Exception):
    """Base exception for all Eventline operations.

    Reconcilers attach the failing operation and resource kind with
    ``with_context`` before re-raising; the exception itself is unchanged.
    """

    operation: Optional[str] = None
    resource: Optional[str] = None

    def with_context(self, operation: str, resource: str) -> "EventlineError":
        self.operation = operation
        self.resource = resource
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.operation:
            return f"{self.operation} ({self.resource}): {message}"
        return message


class TransportError(EventlineError):
    """Request could not be sent or timed out before a response arrived."""
    pass


class EncodeError(EventlineError):
    """Request body could not be serialized to JSON."""
    pass


class DecodeError(EventlineError):
    """Response body was empty or not valid JSON when data was expected."""
    pass


class ValidationError(EventlineError, ValueError):
    """Malformed identifier, import key or enumerated value."""
    pass


class APIError(EventlineError):
    """Structured error returned by the Eventline API.

    Attributes:
        code: Machine-readable error code (e.g. "unknown_project")
        message: Human-readable message from the response
        status_code: HTTP status code of the response
    """

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{message} ({code})")


class NotFoundError(APIError):
    """API error whose code follows the ``unknown_<kind>`` convention.

    Attributes:
        kind: Resource kind named by the code (e.g. "identity")
    """

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(code, message, status_code)
        self.kind = code[len(NOT_FOUND_PREFIX):]


class RequestFailedError(EventlineError):
    """Non-2xx response whose body is not a structured API error."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"request failed with status {status_code}: {body}")


NOT_FOUND_PREFIX = "unknown_"


def api_error(code: str, message: str, status_code: Optional[int] = None) -> APIError:
    """Build the most specific API error class for an error code."""
    if code.startswith(NOT_FOUND_PREFIX) and len(code) > len(NOT_FOUND_PREFIX):
        return NotFoundError(code, message, status_code)
    return APIError(code, message, status_code)
