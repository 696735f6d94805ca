import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from src.core.config import Settings, get_settings
from src.infrastructure.logging_processors import (
    MetricsProcessor,
    ServiceContextProcessor,
    add_caller_info,
    format_exception_info,
    sanitize_sensitive_data,
    set_log_severity,
)


def setup_logging(config: Optional[Settings] = None) -> None:
    config = config or get_settings()
    timestamper = structlog.processors.TimeStamper(fmt="iso")

    shared_processors: list[Processor] = [
        # Operation context bound by the stores
        structlog.contextvars.merge_contextvars,

        ServiceContextProcessor(config),

        structlog.processors.add_log_level,
        set_log_severity,

        # Caller info is only useful while developing
        add_caller_info if config.is_development else lambda *args: args[-1],

        format_exception_info,

        timestamper,

        # Must run last before rendering
        sanitize_sensitive_data,

        MetricsProcessor(),
    ]

    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Loggers pick up a later setup_logging call
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, config.log_level))

    # SQLAlchemy echoes through its own loggers
    for logger_name in ["sqlalchemy.engine", "sqlalchemy.pool"]:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.propagate = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
