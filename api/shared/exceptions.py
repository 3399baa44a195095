"""Shared exceptions for the Chat API."""
from typing import Any, Dict, Optional


class ChatAPIException(Exception):
    """Base exception for the Chat API."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ChatAPIException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthError(ChatAPIException):
    """Raised when the request carries no valid user session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized!"):
        super().__init__(message, "UNAUTHORIZED")


class NotFoundError(ChatAPIException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str, message: Optional[str] = None):
        message = message or f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, "NOT_FOUND", {"resource": resource, "identifier": identifier})


class UpstreamError(ChatAPIException):
    """Raised when the model provider call fails.

    The client sees a fixed message; provider detail stays in ``details``.
    """

    status_code = 502

    def __init__(self, service: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{service} service unavailable", "UPSTREAM_ERROR", details)
