"""Shared pytest fixtures for the contests e2e suite.

This module provides fixtures for:
- Test environment variables
- The fake driver and virtual clock used by unit tests
- Data factories

Usage:
    @pytest.mark.unit
    async def test_something(fake_driver, waits):
        fake_driver.add("#save", appear_at=1.0)
        await waits.wait_for(visible("#save"))
"""

import os
from collections.abc import Generator

import pytest

from contests_e2e.config.settings import get_settings
from contests_e2e.fixtures.data import ContestFactory, UserFactory
from contests_e2e.sync.retry import RetryableAction, RetryPolicy
from contests_e2e.sync.wait import TimeoutTiers, WaitEngine
from tests.support.fakes import FakeClock, FakeDriver

pytest_plugins = ["tests.support.fixtures.browser"]

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    # Load .env file if it exists (won't override existing env vars)
    load_dotenv()

    os.environ.setdefault("BASE_URL", "http://localhost:3000")
    os.environ.setdefault("LOG_LEVEL", "WARNING")

    get_settings.cache_clear()
    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
    get_settings.cache_clear()


# =============================================================================
# Fakes
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Virtual clock; sleeping advances it instantly."""
    return FakeClock()


@pytest.fixture
def fake_driver(clock: FakeClock) -> FakeDriver:
    """In-memory driver bound to the virtual clock."""
    return FakeDriver(clock=clock)


@pytest.fixture
def waits(fake_driver: FakeDriver, clock: FakeClock) -> WaitEngine:
    """Wait engine with default tiers (5s/10s/30s) and a 200ms poll."""
    return WaitEngine(
        fake_driver,
        TimeoutTiers(),
        poll_interval_ms=200,
        clock=clock.monotonic,
        sleep=clock.sleep,
    )


@pytest.fixture
def retry(clock: FakeClock) -> RetryableAction:
    """Retry runner with the default policy (3 attempts, 250ms backoff)."""
    return RetryableAction(RetryPolicy(), sleep=clock.sleep, clock=clock.monotonic)


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def user_factory() -> type[UserFactory]:
    """Provide user factory for registration data."""
    return UserFactory


@pytest.fixture
def contest_factory() -> type[ContestFactory]:
    """Provide contest factory for contest creation data."""
    return ContestFactory
