"""
Request context with request ID tracking.

Each inbound request gets an ID that is attached to every log record
emitted while the request is being handled.
"""

import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Optional

_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
_current_request: ContextVar[Optional['RequestContext']] = ContextVar('current_request', default=None)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Set the request ID in context."""
    _request_id.set(request_id)


def get_current_request() -> Optional['RequestContext']:
    """Get the request being served in this context, if any."""
    return _current_request.get()


class RequestContext:
    """
    Context manager binding a request for the duration of its handling.

    While entered, the request ID and the context itself are visible
    to log filters through ``get_request_id`` and ``get_current_request``.

    Usage:
        with RequestContext(method='GET', path='/api/products') as ctx:
            logger.info("Handling request", extra=ctx.to_dict())
    """

    def __init__(self, method: str, path: str, request_id: Optional[str] = None):
        self.method = method
        self.path = path
        self.request_id = request_id or generate_request_id()
        self.started_at = datetime.now(timezone.utc)
        self._token: Optional[Token] = None
        self._request_token: Optional[Token] = None

    def __enter__(self) -> 'RequestContext':
        self._token = _request_id.set(self.request_id)
        self._request_token = _current_request.set(self)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _request_id.reset(self._token)
            self._token = None
        if self._request_token is not None:
            _current_request.reset(self._request_token)
            self._request_token = None

    @property
    def timestamp(self) -> str:
        """ISO-8601 UTC timestamp of when the request arrived."""
        return self.started_at.isoformat()

    @property
    def elapsed_ms(self) -> int:
        delta = datetime.now(timezone.utc) - self.started_at
        return int(delta.total_seconds() * 1000)

    def to_dict(self) -> dict:
        return {
            'request_id': self.request_id,
            'method': self.method,
            'path': self.path,
            'timestamp': self.timestamp,
        }
