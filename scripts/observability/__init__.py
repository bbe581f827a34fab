"""
Observability module for structured logging.

This module provides:
- Structured logging with request ID, method, path and status
- Request context management
"""

from .logging_config import setup_logging, get_logger
from .context import RequestContext, get_current_request, get_request_id, set_request_id

__all__ = [
    'setup_logging',
    'get_logger',
    'RequestContext',
    'get_current_request',
    'get_request_id',
    'set_request_id',
]
