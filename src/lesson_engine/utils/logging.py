from __future__ import annotations

import logging
from typing import List, Optional

import structlog

from lesson_engine.config.schema import LoggingConfig

PACKAGE_LOGGER = "lesson_engine"


def _shared_processors() -> List:
    """Enrichment applied to structlog events and to records from stdlib `logging` alike."""
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(settings: Optional[LoggingConfig] = None) -> None:
    """
    Route parser warnings, loader errors and engine events through one renderer.

    Modules using `logging.getLogger(__name__)` and the structlog loggers from
    `get_logger` end up in the same `ProcessorFormatter`, so both render as
    console lines or as JSON objects depending on `settings.use_json`. The
    level applies to the `lesson_engine` logger tree; a root handler is only
    installed when the host application has not configured one already.
    """
    settings = settings or LoggingConfig()
    level = logging.getLevelName(settings.level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(settings.use_json))
    logging.basicConfig(handlers=[handler])
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def get_logger(name: Optional[str] = None):
    """Return a structlog logger bound to the stdlib logger `name`."""
    return structlog.get_logger(name)
