"""
Logging setup for Kairos.

structlog sits in front of stdlib logging: modules keep using
``logging.getLogger(__name__)`` and every record, including those from
SQLAlchemy and uvicorn, is rendered by one structlog formatter. Development
gets colored console lines, everything else gets one JSON object per line.

Usage:
    from kairos.lib.logging import setup_logging

    setup_logging(dev_mode=settings.dev_mode)
"""

import logging
import os
import sys

import structlog

# Libraries that log every statement / request at INFO
_QUIET_LOGGERS: tuple[str, ...] = ("sqlalchemy.engine", "uvicorn.access")


def _pre_chain() -> list[structlog.types.Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _resolve_level(log_level: str | None) -> int:
    name = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(dev_mode: bool | None = None, log_level: str | None = None) -> None:
    """
    Route all logging through structlog. Call once at startup.

    Args:
        dev_mode: Console rendering when True, JSON otherwise. Read from
            ``KAIROS_DEV_MODE`` when omitted.
        log_level: Root level name. Read from ``LOG_LEVEL`` when omitted.
    """
    if dev_mode is None:
        dev_mode = os.environ.get("KAIROS_DEV_MODE") == "1"

    pre_chain = _pre_chain()
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if dev_mode else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(log_level))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging"]
