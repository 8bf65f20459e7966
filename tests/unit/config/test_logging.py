"""Unit tests for logging configuration."""

import logging
from collections.abc import Generator

import pytest
import structlog

from contests_e2e.config.logging import NOISY_LOGGERS, configure_logging
from contests_e2e.config.settings import Settings


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_renderer_by_default(self) -> None:
        configure_logging(Settings(_env_file=None, debug=False, log_level="INFO"))

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert processors[0] is structlog.contextvars.merge_contextvars

    def test_console_renderer_in_debug(self) -> None:
        configure_logging(Settings(_env_file=None, debug=True))

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_noisy_loggers_stay_at_warning(self) -> None:
        """
        Given: DEBUG suite logging
        When: Logging is configured
        Then: Third-party chatter is still capped at WARNING
        """
        configure_logging(Settings(_env_file=None, log_level="DEBUG"))

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
