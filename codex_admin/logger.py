"""Structured logging utility for the codex-mcp admin console.

Provides JSON-formatted logging with context and the console's error taxonomy.
"""
import logging
import json
import os
import sys
import traceback
from typing import Any, Dict, Optional
from datetime import datetime, timezone

# Configure root logger with LOG_LEVEL from environment.
# stderr keeps stdout free for command output.
_log_level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
_log_level = getattr(logging, _log_level_str, logging.INFO)
logging.basicConfig(
    level=_log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stderr)]
)

# Cache loggers to avoid repeated lookups
_logger_cache: Dict[str, logging.Logger] = {}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    __slots__ = ()

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        extra = getattr(record, 'extra_fields', None)
        if extra:
            log_data.update(extra)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """Get a cached logger at LOG_LEVEL.

    JSON output is switched on for every logger at once by use_json_logging().

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name in _logger_cache:
        return _logger_cache[name]

    logger = logging.getLogger(name)
    logger.setLevel(_log_level)

    _logger_cache[name] = logger
    return logger


def use_json_logging() -> None:
    """Switch the root handlers to JSON output (CLI --json / CODEX_ADMIN_LOG_JSON)."""
    root = logging.getLogger()
    for handler in root.handlers:
        handler.setFormatter(JSONFormatter())


class ContextLogger:
    """Logger wrapper that adds context fields to all log messages."""

    __slots__ = ('logger', 'context')

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context

    def _log(self, level: int, msg: str, **extra):
        if not self.logger.isEnabledFor(level):
            return
        merged = {**self.context, **extra} if extra else self.context
        record = self.logger.makeRecord(
            self.logger.name,
            level,
            "(unknown file)",
            0,
            msg,
            (),
            None,
        )
        record.extra_fields = merged
        self.logger.handle(record)

    def bind(self, **context) -> "ContextLogger":
        """Return a new ContextLogger with additional context fields."""
        return ContextLogger(self.logger, **{**self.context, **context})

    def debug(self, msg: str, **extra):
        self._log(logging.DEBUG, msg, **extra)

    def info(self, msg: str, **extra):
        self._log(logging.INFO, msg, **extra)

    def warning(self, msg: str, **extra):
        self._log(logging.WARNING, msg, **extra)


# Error taxonomy for the admin console
class ConsoleError(Exception):
    """Base exception for all admin console errors."""
    pass


class ValidationError(ConsoleError):
    """Local input validation failed; no request was issued."""
    pass


class ConfigurationError(ConsoleError):
    """Error in configuration or environment setup."""
    pass


class RemoteError(ConsoleError):
    """A backend call failed (transport error or non-success status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LoadError(RemoteError):
    pass


class CreateError(RemoteError):
    pass


class DeleteError(RemoteError):
    pass


class UpdateError(RemoteError):
    pass


class PullError(UpdateError):
    pass


class SaveError(RemoteError):
    pass


def safe_float(value: Any, default: float, logger: Optional[logging.Logger] = None, context: str = "") -> float:
    """Safely convert value to float with logging on failure."""
    try:
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return default
        return float(value)
    except (ValueError, TypeError) as e:
        if logger:
            logger.warning(f"Failed to convert {context} to float: {value}", exc_info=e)
        return default


def safe_bool(value: Any, default: bool, logger: Optional[logging.Logger] = None, context: str = "") -> bool:
    """Safely convert value to bool; unrecognised strings fall back to default."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    if logger:
        logger.warning(f"Failed to convert {context} to bool: {value}")
    return default
