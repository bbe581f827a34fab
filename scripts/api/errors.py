"""
Error taxonomy for API responses.

Every failure is an ``AppError`` tagged with an ``ErrorKind``. The kind
fixes the HTTP status and the default message; the raise site may
override the message. Errors are classified once, where they are
detected, and only the error responder turns them into a response.
"""

import traceback
from enum import Enum
from typing import Optional, Dict, Any
from flask import jsonify


class ErrorKind(Enum):
    """Error kinds with their default message and HTTP status."""

    INTERNAL = ("Internal Server Error", 500)
    NOT_FOUND = ("Resource not found", 404)
    VALIDATION = ("Validation failed", 400)
    UNAUTHORIZED = ("Unauthorized", 401)

    def __init__(self, default_message: str, status_code: int):
        self.default_message = default_message
        self.status_code = status_code


class AppError(Exception):
    """
    Application error carrying a kind and a message.

    Example:
        raise AppError(ErrorKind.NOT_FOUND, "Product not found")
    """

    def __init__(self, kind: ErrorKind = ErrorKind.INTERNAL, message: Optional[str] = None):
        """
        Initialize application error.

        Args:
            kind: Error classification
            message: Human-readable message; defaults to the kind's message
        """
        self.kind = kind
        self.message = message or kind.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self, include_stack: bool = False) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON response.

        Args:
            include_stack: Add the formatted traceback under ``stack``

        Returns:
            Dictionary shaped ``{"error": ..., "stack": ...}``
        """
        return error_body(self.message, self if include_stack else None)

    def __repr__(self) -> str:
        return f"AppError({self.kind.name}, {self.message!r})"


def format_stack(error: BaseException) -> str:
    """Render an exception and its traceback as a single string."""
    return ''.join(traceback.format_exception(type(error), error, error.__traceback__))


def error_body(message: str, error: Optional[BaseException] = None) -> Dict[str, Any]:
    """Build the error response body, with a stack when ``error`` is given."""
    body: Dict[str, Any] = {"error": message}
    if error is not None:
        body["stack"] = format_stack(error)
    return body


def error_response(message: str, status_code: int, error: Optional[BaseException] = None):
    """
    Create a Flask JSON error response.

    Args:
        message: Value for the ``error`` field
        status_code: HTTP status code
        error: Exception whose traceback goes under ``stack``; omit in production

    Returns:
        Flask JSON response with the given status code
    """
    response = jsonify(error_body(message, error))
    response.status_code = status_code
    return response
