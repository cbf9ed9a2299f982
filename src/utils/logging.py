"""Structured logging utilities with correlation IDs, performance timing, and payload redaction."""

import logging
import time
import uuid
import re
import hashlib
from contextvars import ContextVar
from typing import Any, Optional, Dict, Callable
from contextlib import contextmanager
from functools import wraps

from src.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

# data:<mime>;base64,<payload>
_DATA_URL_PATTERN = re.compile(r'data:([\w.+-]+/[\w.+-]+);base64,[A-Za-z0-9+/=]+')


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set the correlation ID in context."""
    _correlation_id_var.set(correlation_id)


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Context manager for correlation ID propagation."""
    if correlation_id is None:
        correlation_id = generate_correlation_id()

    old_id = get_correlation_id()
    set_correlation_id(correlation_id)
    try:
        yield correlation_id
    finally:
        set_correlation_id(old_id)


def redact_data_urls(text: str) -> str:
    """Collapse inline base64 payloads so image bytes never reach the logs."""
    if not text:
        return text

    def _collapse(match: re.Match) -> str:
        return f"[DATA_URL {match.group(1)} len={len(match.group(0))}]"

    return _DATA_URL_PATTERN.sub(_collapse, text)


def mask_sensitive_data(text: str) -> str:
    """Mask emails, bearer tokens and API keys in text."""
    if not text:
        return text

    text = redact_data_urls(text)
    if not LoggingConfig.LOG_MASK_SENSITIVE:
        return text

    text = re.sub(
        r'[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}',
        '[REDACTED_EMAIL]',
        text,
        flags=re.IGNORECASE
    )

    text = re.sub(
        r'(?i)bearer\s+[A-Za-z0-9._-]+',
        'Bearer [REDACTED]',
        text
    )

    # Google API keys and generic key=value secrets
    text = re.sub(r'AIza[0-9A-Za-z_-]{35}', '[REDACTED_API_KEY]', text)
    text = re.sub(
        r'(?i)(api[_-]?key|key|token|secret|password)([\s:=]+)([A-Za-z0-9_-]{20,})',
        r'\1\2[REDACTED]',
        text
    )

    return text


def mask_user_id(user_id: Optional[str]) -> Optional[str]:
    """Mask or hash user ID for privacy."""
    if not LoggingConfig.LOG_MASK_SENSITIVE or not user_id:
        return user_id

    if len(user_id) > 12:
        hashed = hashlib.sha256(user_id.encode()).hexdigest()[:8]
        return f"{user_id[:4]}...{hashed}"
    return user_id


class StructuredLogger:
    """Logger wrapper that sends keyword fields through ``extra``."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        extra: Dict[str, Any] = {}

        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        for key, value in kwargs.items():
            extra[key] = mask_sensitive_data(value) if isinstance(value, str) else value

        return extra

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=self._get_extra(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=self._get_extra(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=self._get_extra(**kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self.logger.error(message, extra=self._get_extra(**kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self.logger.exception(message, extra=self._get_extra(**kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """Log the duration of a pipeline step, flagging slow or failed runs."""
    if logger is None:
        logger = get_structured_logger(__name__)

    start_time = time.time()
    outcome = "ok"
    logger.debug(f"Starting {operation_name}", operation=operation_name, **context)

    try:
        yield
    except Exception as e:
        outcome = "failed"
        context["error_type"] = type(e).__name__
        raise
    finally:
        elapsed_ms = round((time.time() - start_time) * 1000, 2)
        slow = elapsed_ms > LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS
        log = logger.warning if slow else logger.info
        log(
            f"Finished {operation_name}",
            operation=operation_name,
            outcome=outcome,
            processing_time_ms=elapsed_ms,
            slow=slow,
            **context
        )


def timed(operation_name: Optional[str] = None, logger: Optional[StructuredLogger] = None):
    """Decorator timing a coroutine function with log_timing."""
    def decorator(func: Callable) -> Callable:
        op_name = operation_name or f"{func.__module__}.{func.__name__}"
        log = logger or get_structured_logger(func.__module__)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            with log_timing(op_name, logger=log):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
