"""
Centralized logging configuration with structured JSON logging.

Records emitted while a request is being served carry that request's
ID, HTTP method and path. Completion and error records add the
response status (``status_code``) and, for completions, ``duration_ms``.

Provides:
- JSON structured output
- Text output with a compact request line
- Configurable log levels
- Log rotation
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
from pythonjsonlogger.json import JsonFormatter

from .context import get_current_request, get_request_id

# Added by RequestFieldsFilter for the text format only
_TEXT_ONLY_FIELDS = ('request_line',)


def format_request_line(record: logging.LogRecord) -> str:
    """Render ``METHOD path [status]`` for a record, or ``-`` outside a request."""
    method = getattr(record, 'method', None)
    path = getattr(record, 'path', None)
    if not method or not path:
        return '-'

    status = getattr(record, 'status_code', None)
    return f"{method} {path} {status}" if status else f"{method} {path}"


class RequestFieldsFilter(logging.Filter):
    """
    Logging filter that stamps the current request onto log records.

    Sets ``request_id`` always (``'none'`` outside a request), and
    ``method`` / ``path`` when a request is being served. Values passed
    through ``extra`` win over the ones taken from context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_current_request()

        if not getattr(record, 'request_id', None):
            record.request_id = ctx.request_id if ctx else (get_request_id() or 'none')

        if ctx is not None:
            if not getattr(record, 'method', None):
                record.method = ctx.method
            if not getattr(record, 'path', None):
                record.path = ctx.path

        record.request_line = format_request_line(record)
        return True


class CustomJsonFormatter(JsonFormatter):
    """
    JSON formatter with consistent field names.

    Every record carries timestamp, level, component (logger name) and
    request_id. Request-scoped records add method and path, and
    status_code / duration_ms when the caller supplied them.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = self.formatTime(record, self.datefmt)

        log_record['level'] = record.levelname
        log_record['component'] = record.name

        if not log_record.get('request_id'):
            log_record['request_id'] = getattr(record, 'request_id', 'none')

        # method and path only exist inside a request
        for field in ('method', 'path'):
            if log_record.get(field) is None:
                log_record.pop(field, None)

        for field in _TEXT_ONLY_FIELDS:
            log_record.pop(field, None)


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_dir: Optional[str] = None,
    enable_console: bool = True,
    enable_file: bool = True
) -> None:
    """
    Setup centralized logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ('json' or 'text')
        log_dir: Directory for log files (default: data/logs)
        enable_console: Whether to log to console
        enable_file: Whether to log to files

    Example:
        setup_logging(log_level='DEBUG', log_format='text', enable_file=False)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    request_filter = RequestFieldsFilter()

    if log_format == 'json':
        formatter = CustomJsonFormatter(
            '%(timestamp)s %(level)s %(component)s %(request_id)s %(method)s %(path)s %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s [%(request_id)s] %(levelname)-8s [%(name)s] %(request_line)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(request_filter)
        root_logger.addHandler(console_handler)

    if enable_file:
        if log_dir is None:
            log_dir = os.path.join('data', 'logs')
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        main_file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=7
        )
        main_file_handler.setLevel(numeric_level)
        main_file_handler.setFormatter(formatter)
        main_file_handler.addFilter(request_filter)
        root_logger.addHandler(main_file_handler)

        error_file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'error.log'),
            maxBytes=10 * 1024 * 1024,
            backupCount=7
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(formatter)
        error_file_handler.addFilter(request_filter)
        root_logger.addHandler(error_file_handler)

    # werkzeug logs every request itself; ours already do
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            'log_level': log_level,
            'log_format': log_format,
            'log_dir': log_dir,
            'console_enabled': enable_console,
            'file_enabled': enable_file
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a component.

    Example:
        logger = get_logger(__name__)
        logger.info("Product created", extra={'product_id': product.id})
    """
    return logging.getLogger(name)
