"""Logging configuration using structlog.

Suite events are snake_case (``wait_timed_out``, ``action_retry``,
``fixture_teardown_failed``). The test id is bound as a context variable by
the runner, so every event emitted while a test runs carries it.
"""

from __future__ import annotations

import logging
import sys

import structlog

from contests_e2e.config.settings import Settings, get_settings

# Third-party loggers that flood DEBUG output during browser runs
NOISY_LOGGERS = ("asyncio", "faker.factory", "httpx", "httpcore")


def _renderer(settings: Settings) -> structlog.types.Processor:
    if settings.debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for suite runs.

    Pretty console output when ``DEBUG`` is set, one JSON object per line
    otherwise (CI artifacts).
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(settings),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(name)s %(message)s", stream=sys.stderr, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
