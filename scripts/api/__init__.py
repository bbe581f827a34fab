"""
API layer for HTTP request handling.

Provides:
- Error taxonomy shared by every layer
- Request middleware (api.middleware)
- Product routes (api.routes)
"""

from .errors import (
    AppError,
    ErrorKind,
    error_body,
    error_response
)

__all__ = [
    'AppError',
    'ErrorKind',
    'error_body',
    'error_response',
]
