"""Custom structlog processors for token store logging"""

import socket
import sys
import traceback
from typing import Any, Dict

from structlog.types import EventDict, WrappedLogger

from src.core.config import Settings

REDACTED = "***REDACTED***"

# Keys matched exactly; "token_id" and friends stay readable
SENSITIVE_KEYS = {"hash", "token_hash", "plaintext", "authorization", "bearer"}

# Keys matched by substring
SENSITIVE_FRAGMENTS = ("password", "secret", "private_key", "api_key")


class ServiceContextProcessor:
    """Add service-level context from the settings logging was set up with"""

    def __init__(self, config: Settings):
        self.service = config.app_name
        self.environment = config.environment
        try:
            self.hostname = socket.gethostname()
        except OSError:
            self.hostname = None

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict["service"] = self.service
        event_dict["environment"] = self.environment
        if self.hostname:
            event_dict["hostname"] = self.hostname
        return event_dict


def is_sensitive_key(key: str) -> bool:
    lower_key = key.lower()
    if lower_key in SENSITIVE_KEYS:
        return True
    return any(fragment in lower_key for fragment in SENSITIVE_FRAGMENTS)


def sanitize_sensitive_data(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask secrets and token hashes"""

    def sanitize_dict(d: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {}
        for key, value in d.items():
            if is_sensitive_key(key):
                sanitized[key] = REDACTED
            elif isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif isinstance(value, list):
                sanitized[key] = [
                    sanitize_dict(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                sanitized[key] = value

        return sanitized

    return sanitize_dict(event_dict)


def add_caller_info(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add caller location information for debugging"""
    import inspect

    frame = None
    for record in inspect.stack()[1:]:
        module = inspect.getmodule(record.frame)
        if module and not module.__name__.startswith(("structlog", "logging")):
            frame = record
            break

    if frame:
        event_dict["caller"] = {
            "filename": frame.filename.split("/")[-1],
            "function": frame.function,
            "lineno": frame.lineno
        }

    return event_dict


def format_exception_info(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Format exception information for better readability"""
    exc_info = event_dict.pop("exc_info", None)
    if exc_info:
        if isinstance(exc_info, tuple):
            exc_type, exc_value, exc_tb = exc_info
        elif isinstance(exc_info, BaseException):
            exc_type, exc_value, exc_tb = type(exc_info), exc_info, exc_info.__traceback__
        else:
            exc_type, exc_value, exc_tb = sys.exc_info()

        if exc_type:
            event_dict["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb)
            }

    return event_dict


def set_log_severity(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Set severity field for log aggregation systems"""
    level_map = {
        "debug": "DEBUG",
        "info": "INFO",
        "warning": "WARNING",
        "error": "ERROR",
        "critical": "CRITICAL"
    }

    if "level" in event_dict:
        event_dict["severity"] = level_map.get(event_dict["level"], "INFO")

    return event_dict


class MetricsProcessor:
    """Processor that counts log messages by level"""

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        from src.infrastructure.metrics import log_messages_total

        if "level" in event_dict:
            log_messages_total.labels(
                level=event_dict["level"],
                logger=getattr(logger, "name", "unknown")
            ).inc()

        return event_dict
