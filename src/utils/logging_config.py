"""Centralized logging configuration with environment variable support."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger

# Client libraries that log every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "storage3", "postgrest")


class LoggingConfig:
    """Centralized logging configuration."""

    SERVICE_NAME = os.environ.get("SERVICE_NAME", "listings-backend")
    ENVIRONMENT = os.environ.get("ENVIRONMENT", "production").lower()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    _configured = False

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON lines stamped with service and environment, or plain text for local runs."""
        if cls.LOG_FORMAT != "json":
            return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp", "name": "logger"},
            static_fields={"service": cls.SERVICE_NAME, "environment": cls.ENVIRONMENT},
        )

    @classmethod
    def setup_logging(cls, force: bool = False) -> None:
        """Configure the root logger once per process (warm serverless instances reuse it)."""
        if cls._configured and not force:
            return

        level = getattr(logging, cls.LOG_LEVEL, logging.INFO)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        # stdout for serverless/Vercel
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(cls.build_formatter())
        root_logger.addHandler(handler)

        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        cls._configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
