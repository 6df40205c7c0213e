# ═══════════════════════════════════════════════════════════════
# cmdrunner - Structured Logging
# JSON / console output with per-invocation context
# ═══════════════════════════════════════════════════════════════

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from .config import get_settings


# ═══════════════════════════════════════════════════════════════
# Context Variables for Invocation Tracking
# ═══════════════════════════════════════════════════════════════

invocation_id_var: ContextVar[Optional[str]] = ContextVar('invocation_id', default=None)
runner_var: ContextVar[Optional[str]] = ContextVar('runner', default=None)


def get_context() -> Dict[str, Optional[str]]:
    """Get current logging context."""
    return {
        'invocation_id': invocation_id_var.get(),
        'runner': runner_var.get(),
    }


@contextmanager
def logging_context(
    invocation_id: Optional[str] = None,
    runner: Optional[str] = None,
):
    """
    Context manager for setting logging context.

    Usage:
        with logging_context(invocation_id="3f2a9c1e"):
            logger.debug("Spawning")  # Includes invocation_id
    """
    tokens = []

    if invocation_id is not None:
        tokens.append(invocation_id_var.set(invocation_id))
    if runner is not None:
        tokens.append(runner_var.set(runner))

    try:
        yield
    finally:
        for token in reversed(tokens):
            token.var.reset(token)


# ═══════════════════════════════════════════════════════════════
# Formatters
# ═══════════════════════════════════════════════════════════════

class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Produces one JSON object per line. Records logged inside an invocation
    carry an ``invocation`` object with its id and runner type.
    """

    def __init__(self, include_traceback: bool = True):
        super().__init__()
        self.include_traceback = include_traceback

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        context = get_context()
        if context['invocation_id'] is not None:
            log_entry['invocation'] = {
                'id': context['invocation_id'],
                'runner': context['runner'],
            }

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value) if exc_value else None,
            }
            if self.include_traceback:
                log_entry['exception']['traceback'] = traceback.format_exception(*record.exc_info)

        if record.stack_info:
            log_entry['stack_info'] = record.stack_info

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Colored console formatter for development.

    Lines read like:

        [2026-10-18 12:00:00] [DEBUG   ] local#3f2a9c1e12ab: Finished: ssh | returncode=0 pid=4242

    While an invocation is bound (see logging_context) its
    ``runner#invocation_id`` tag takes the place of the logger name.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    @staticmethod
    def source(record: logging.LogRecord) -> str:
        """Invocation tag if one is bound, else the logger name."""
        context = get_context()
        if context['invocation_id'] is None:
            return record.name
        return f"{context['runner'] or record.name}#{context['invocation_id']}"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')

        message = (
            f"{color}[{timestamp}] [{record.levelname:8}] "
            f"{self.source(record)}: {record.getMessage()}{self.RESET}"
        )

        if getattr(record, 'extra_fields', None):
            extras = ' '.join(f"{k}={v}" for k, v in record.extra_fields.items())
            message += f" | {extras}"

        if record.exc_info:
            message += f"\n{self.COLORS['ERROR']}{self.formatException(record.exc_info)}{self.RESET}"

        return message


# ═══════════════════════════════════════════════════════════════
# Structured Logger
# ═══════════════════════════════════════════════════════════════

class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter accepting ``extra_fields=`` on every log call.

    The fields end up on the record as ``record.extra_fields`` where both
    formatters pick them up.
    """

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any],
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra_fields = kwargs.pop('extra_fields', None)
        extra = dict(kwargs.get('extra') or {})
        if self.extra:
            extra.update(self.extra)
        if extra_fields:
            extra['extra_fields'] = extra_fields
        kwargs['extra'] = extra
        return msg, kwargs


# Library default: stay silent unless the application configures logging.
logging.getLogger('cmdrunner').addHandler(logging.NullHandler())

_configured = False


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for an application using cmdrunner.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ('json' or 'console')
        log_file: Optional file path for logging
    """
    global _configured

    if _configured:
        return

    settings = get_settings()

    level = getattr(logging, (log_level or settings.log_level).upper())
    format_type = log_format or settings.log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if format_type == 'json':
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # asyncio logs every slow callback at DEBUG
    logging.getLogger('asyncio').setLevel(max(level, logging.WARNING))

    _configured = True


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger wrapping the named standard logger
    """
    return StructuredLogger(logging.getLogger(name), {})
