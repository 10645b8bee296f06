"""Logging setup shared by the API process and the ingestion commands.

Stdlib ``logging`` carries the HTTP layer; ``structlog`` carries the pipeline
and ingestion layers and renders through the same stdout stream.
"""
from __future__ import annotations

import logging
import sys

import structlog

from core.settings import SETTINGS

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    level_name = (level or SETTINGS.APP.LOG_LEVEL).upper()
    as_json = SETTINGS.APP.JSON_LOGS if json_logs is None else json_logs
    numeric_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if as_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
