"""
Logging configuration.

Console logging to stdout for every environment:
- Human-readable lines in development
- Structured JSON lines in staging/production so log shippers can parse them
"""

import json
import logging
import sys

from modelscout.config.config import Config

logger = logging.getLogger(__name__)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as JSON with the logger name, level and any exception
    text attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: LogRecord to format

        Returns:
            str: JSON-formatted log entry
        """
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add any extra fields
        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


def configure_logging(level: str | None = None) -> None:
    """
    Configure application logging.

    Sets up a single stdout handler on the root logger, using plain text in
    development and JSON everywhere else.

    Args:
        level: Optional log level name overriding Config.LOG_LEVEL
    """
    level_name = (level or Config.LOG_LEVEL or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    # Use simple format for console in development, JSON in production
    if Config.IS_DEVELOPMENT:
        console_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        console_formatter = StructuredFormatter()

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    # Set log levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info(f"📝 Console logging configured (level={level_name}, env={Config.APP_ENV})")
