# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Structured logging configuration using structlog.

JSON logs in production, colored console output for local development.
Access codes, passwords, secrets and tokens are masked before rendering.
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from concierge_intake import __version__
from concierge_intake.config import Settings

SENSITIVE_KEY_PATTERNS = ["password", "secret", "token", r"^code$", "authorization"]


class SensitiveDataMasker:
    """Processor to mask sensitive data in log output."""

    def __init__(self, patterns: list[str], mask_value: str = "[REDACTED]"):
        self.patterns = [re.compile(p, re.IGNORECASE) for p in patterns]
        self.mask_value = mask_value

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        return self._mask_dict(event_dict)

    def _mask_dict(self, d: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in d.items():
            if any(pattern.search(key) for pattern in self.patterns):
                result[key] = self.mask_value
            elif isinstance(value, dict):
                result[key] = self._mask_dict(value)
            else:
                result[key] = value
        return result


def _app_context(environment: str):
    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        """Add application context to all log entries."""
        event_dict["service"] = "concierge-intake"
        event_dict["version"] = __version__
        event_dict["environment"] = environment
        return event_dict

    return add_app_context


def configure_logging(settings: Settings) -> None:
    """Configure structured logging for the application."""
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _app_context(settings.environment),
        SensitiveDataMasker(SENSITIVE_KEY_PATTERNS),
    ]

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.stdlib.get_logger(name)
