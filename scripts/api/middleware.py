"""
Flask middleware for request processing.

Provides:
- Ordered request pipeline (logging, API key authentication)
- JSON body parsing and product validation
- Response logging
- Error handling
"""

import secrets
from functools import wraps
from typing import Any, Callable, Iterable, Optional
from flask import request, g, current_app, json, Request
from werkzeug.exceptions import HTTPException, NotFound

from observability import RequestContext, get_logger
from catalog import validate_product
from .errors import AppError, ErrorKind, error_response

logger = get_logger(__name__)

Interceptor = Callable[[Request], None]


class RequestPipeline:
    """
    Ordered chain of request interceptors.

    Each interceptor receives the current request and either returns
    (continue) or raises ``AppError`` (stop). The first raise skips every
    remaining interceptor and the view; Flask hands the error to the
    registered error handlers.

    Usage:
        pipeline = RequestPipeline([log_request, require_api_key('secret')])
        app.before_request(pipeline)
    """

    def __init__(self, interceptors: Optional[Iterable[Interceptor]] = None):
        self._interceptors = list(interceptors or [])

    def use(self, interceptor: Interceptor) -> 'RequestPipeline':
        """Append an interceptor to the end of the chain."""
        self._interceptors.append(interceptor)
        return self

    @property
    def interceptors(self) -> tuple:
        return tuple(self._interceptors)

    def __call__(self) -> None:
        for interceptor in self._interceptors:
            interceptor(request)


def log_request(req: Request) -> None:
    """Bind a request context and log method, path and arrival time."""
    ctx = RequestContext(req.method, req.path, req.headers.get('X-Request-ID'))
    ctx.__enter__()
    g.request_context = ctx

    logger.info("Request started", extra=ctx.to_dict())


def _under_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip('/') + '/')


def require_api_key(expected_key: str, prefix: str = '/api') -> Interceptor:
    """
    Build an interceptor enforcing the shared API key under ``prefix``.

    The key is read from ``x-api-key``, falling back to ``authorization``.

    Args:
        expected_key: Configured secret
        prefix: Path prefix the check applies to

    Returns:
        Interceptor raising UNAUTHORIZED on a missing or wrong key
    """
    expected = expected_key.encode('utf-8')

    def authenticate(req: Request) -> None:
        # CORS preflight carries no credentials
        if req.method == 'OPTIONS' or not _under_prefix(req.path, prefix):
            return

        provided = req.headers.get('x-api-key') or req.headers.get('authorization')

        # Use constant-time comparison to prevent timing attacks
        if not provided or not secrets.compare_digest(provided.encode('utf-8'), expected):
            logger.warning(
                "API key authentication failed",
                extra={
                    'path': req.path,
                    'remote_addr': req.remote_addr,
                    'reason': 'missing' if not provided else 'mismatch'
                }
            )
            raise AppError(ErrorKind.UNAUTHORIZED, "Invalid or missing API key")

    return authenticate


def read_json_body() -> Any:
    """
    Decode the request body as JSON.

    An empty body decodes to ``{}``; ``null`` decodes to ``None`` and is
    left for the payload validator to reject.

    Raises:
        AppError: VALIDATION when the body is not valid JSON
    """
    data = request.get_data(cache=True)
    if not data.strip():
        return {}

    try:
        return json.loads(data)
    except ValueError:
        raise AppError(ErrorKind.VALIDATION, "Request body must be valid JSON")


def validate_product_body(require_all: bool = True):
    """
    Decorator validating the product payload before the view runs.

    The validated payload is stored on ``g.product_payload``.

    Args:
        require_all: Require every product field (False checks only
            the fields present)

    Usage:
        @api.route('/products', methods=['POST'])
        @validate_product_body()
        def create_product():
            ...
    """

    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            payload = read_json_body()
            validate_product(payload, require_all=require_all)
            g.product_payload = payload
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def request_logging_middleware(app):
    """
    Log request completion and release the request context.

    Adds the request ID to every response as ``X-Request-ID``.
    """

    @app.after_request
    def after_request(response):
        ctx = g.get('request_context')
        if ctx is not None:
            response.headers['X-Request-ID'] = ctx.request_id
            logger.info(
                "Request completed",
                extra={
                    'status_code': response.status_code,
                    'duration_ms': ctx.elapsed_ms
                }
            )
        return response

    @app.teardown_request
    def teardown_request(exc=None):
        ctx = g.pop('request_context', None)
        if ctx is not None:
            ctx.__exit__(None, None, None)


def _include_stack() -> bool:
    return current_app.config.get('INCLUDE_ERROR_STACK', False)


def error_handler_middleware(app):
    """
    Register the error responder.

    This is the only place an error response is written. The stack
    trace is added to the body when ``INCLUDE_ERROR_STACK`` is set.
    """

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        log = logger.error if error.status_code >= 500 else logger.warning
        log(
            f"Application error: {error.message}",
            extra={'error_kind': error.kind.name, 'status_code': error.status_code}
        )
        return error_response(
            error.message,
            error.status_code,
            error if _include_stack() else None
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        # Routing redirects are not errors
        if error.code is not None and error.code < 400:
            return error

        if isinstance(error, NotFound):
            message = f"Endpoint not found: {request.path}"
        else:
            message = error.description or error.name

        response = error_response(message, error.code or 500, error if _include_stack() else None)
        if error.code == 405 and getattr(error, 'valid_methods', None):
            response.headers['Allow'] = ', '.join(error.valid_methods)
        return response

    @app.errorhandler(Exception)
    def handle_exception(error: Exception):
        logger.exception(
            "Unhandled exception",
            extra={'path': request.path, 'error_type': type(error).__name__}
        )

        if _include_stack():
            return error_response(str(error) or ErrorKind.INTERNAL.default_message, 500, error)
        return error_response(ErrorKind.INTERNAL.default_message, 500)


def setup_middleware(app, api_key: str, api_prefix: str = '/api') -> RequestPipeline:
    """
    Setup all middleware for the Flask application.

    Args:
        app: Flask application instance
        api_key: Shared secret for routes under ``api_prefix``
        api_prefix: Path prefix requiring authentication

    Returns:
        The request pipeline registered on the app
    """
    error_handler_middleware(app)
    request_logging_middleware(app)

    # Order matters: logging runs for every request, even rejected ones
    pipeline = RequestPipeline([
        log_request,
        require_api_key(api_key, api_prefix),
    ])
    app.before_request(pipeline)
    app.extensions['request_pipeline'] = pipeline

    logger.info("All middleware configured successfully")
    return pipeline
