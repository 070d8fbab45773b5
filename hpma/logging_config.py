"""
HPMA — structlog setup

Configures structlog once for the process.  JSON lines by default; a console
renderer when ``HPMA_LOG_JSON=false`` for local runs.  Log lines go to
stderr so command output on stdout stays machine-readable.
"""

from __future__ import annotations

import sys

import structlog

from hpma.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Install the structlog processor chain for the given settings."""
    settings = settings or get_settings()

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_number),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=settings.is_production,
    )
