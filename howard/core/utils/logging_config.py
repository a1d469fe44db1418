"""
Logging setup for the Howard API.

JSON lines in production (one object per record, picked up by the platform
log drain) and a compact colored format for local development.
"""

import os
import sys
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import g, has_request_context, request


class RequestContextFilter(logging.Filter):
    """Attach method/path/user of the current Flask request to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = {}
        if has_request_context():
            ctx['method'] = request.method
            ctx['path'] = request.path
            user_id = getattr(g, 'profile_id', None)
            if user_id:
                ctx['user_id'] = user_id
        existing = getattr(record, 'extra', None) or {}
        record.extra = {**ctx, **existing}
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'line': record.lineno,
        }
        extra = getattr(record, 'extra', None)
        if extra:
            entry.update(extra)
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Readable single-line records for the terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        reset = self.RESET if color else ''
        stamp = datetime.now().strftime('%H:%M:%S')
        where = f'{record.name}:{record.lineno}'

        line = f'{color}{stamp} {record.levelname:8}{reset} {where:36} {record.getMessage()}'

        extra = getattr(record, 'extra', None)
        if extra:
            line += ' | ' + ' '.join(f'{k}={v}' for k, v in extra.items())
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def _wants_json() -> bool:
    return os.environ.get('PRODUCTION', '').lower() == 'true' or \
        'gunicorn' in os.environ.get('SERVER_SOFTWARE', '')


def setup_logging(
    level: str = 'INFO',
    json_format: Optional[bool] = None,
    logger_name: str = 'howard'
) -> logging.Logger:
    """Configure the ``howard`` logger tree and return its root.

    Args:
        level: Log level name.
        json_format: Force JSON output on/off. Auto-detected when None.
        logger_name: Root logger of the application.
    """
    if json_format is None:
        json_format = _wants_json()

    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logger.level)
    handler.setFormatter(JSONFormatter() if json_format else DevelopmentFormatter())
    handler.addFilter(RequestContextFilter())

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = 'howard') -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Add fields to every record emitted inside the ``with`` block.

        with LogContext(logger, job='task_recurrence'):
            logger.info('Starting run')
    """

    def __init__(self, logger: logging.Logger, **fields):
        self.logger = logger
        self.fields = fields
        self._previous = None

    def __enter__(self):
        self._previous = logging.getLogRecordFactory()
        previous, fields = self._previous, self.fields

        def factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            merged = dict(getattr(record, 'extra', None) or {})
            merged.update(fields)
            record.extra = merged
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous)
        return False
