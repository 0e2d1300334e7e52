"""Structlog-based logging for the family graph engine.

Library code logs through structlog; no print() outside the CLI. Events are
handed to the standard library root logger so CLI stdout stays clean.
"""
from __future__ import annotations

import logging
import os
from typing import Literal

import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(level: LogLevel | None = None) -> None:
    level = level or os.getenv("FAMILY_ENGINE_LOG_LEVEL", "INFO").upper()  # type: ignore[assignment]
    numeric = getattr(logging, str(level), logging.INFO)
    logging.basicConfig(format="%(message)s", level=numeric)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "family_engine"):
    return structlog.get_logger(name)


# Initialize default config
configure_logging()
