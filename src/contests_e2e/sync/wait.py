"""
Wait Engine

Polls a condition until it holds or its timeout elapses.
Every wait is bounded: callers pass a timeout in milliseconds or a named
tier, and omitting it means the MEDIUM tier.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import TransientDriverError, WaitTimeoutError
from contests_e2e.driver.protocol import Driver
from contests_e2e.sync.conditions import Observation, Predicate, WaitCondition

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL_MS = 200


class TimeoutTier(str, Enum):
    """Named timeout budgets shared by the whole suite."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


Timeout = int | TimeoutTier | None


@dataclass(frozen=True)
class TimeoutTiers:
    """Millisecond values of the named tiers."""

    short_ms: int = 5_000
    medium_ms: int = 10_000
    long_ms: int = 30_000

    @classmethod
    def from_settings(cls, settings: Settings) -> TimeoutTiers:
        return cls(
            short_ms=settings.timeout_short_ms,
            medium_ms=settings.timeout_medium_ms,
            long_ms=settings.timeout_long_ms,
        )

    def resolve(self, timeout: Timeout) -> int:
        """Turn an explicit value, a tier, or None (MEDIUM) into milliseconds."""
        if timeout is None:
            return self.medium_ms
        if isinstance(timeout, TimeoutTier):
            return {
                TimeoutTier.SHORT: self.short_ms,
                TimeoutTier.MEDIUM: self.medium_ms,
                TimeoutTier.LONG: self.long_ms,
            }[timeout]
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")
        return timeout


@dataclass(frozen=True)
class WaitResult:
    """Outcome of a wait that did not raise."""

    satisfied: bool
    elapsed_ms: int
    polls: int
    observation: Observation | None = None

    @property
    def value(self) -> Any:
        """Value captured by the condition in the successful tick."""
        return self.observation.value if self.observation else None


class WaitEngine:
    """Polls conditions against one driver.

    Attributes:
        driver: Driver the conditions are evaluated against.
        tiers: Timeout tier values.
        poll_interval_ms: Delay between two checks.

    Example:
        waits = WaitEngine(driver)
        await waits.wait_for(visible("#save"), TimeoutTier.SHORT)
        await waits.wait_for(hidden(".ant-spin"), best_effort=True)
    """

    def __init__(
        self,
        driver: Driver,
        tiers: TimeoutTiers | None = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        self.driver = driver
        self.tiers = tiers or TimeoutTiers()
        self.poll_interval_ms = poll_interval_ms
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls, driver: Driver, settings: Settings, **kwargs: Any) -> WaitEngine:
        return cls(
            driver,
            tiers=TimeoutTiers.from_settings(settings),
            poll_interval_ms=settings.poll_interval_ms,
            **kwargs,
        )

    async def wait_for(
        self,
        condition: WaitCondition,
        timeout: Timeout = None,
        *,
        best_effort: bool = False,
    ) -> WaitResult:
        """Poll ``condition`` until it holds.

        Args:
            condition: Condition to evaluate each tick.
            timeout: Milliseconds, a ``TimeoutTier``, or None for MEDIUM.
            best_effort: Return an unsatisfied result on timeout instead of raising.

        Returns:
            WaitResult of the successful tick, or an unsatisfied one
            when ``best_effort`` is set and the budget ran out.

        Raises:
            WaitTimeoutError: If the condition never held and ``best_effort`` is False.
        """
        timeout_ms = self.tiers.resolve(timeout)
        budget = timeout_ms / 1000
        poll = self.poll_interval_ms / 1000
        started = self._clock()
        polls = 0
        observation: Observation | None = None

        log.debug("wait_started", condition=condition.description, timeout_ms=timeout_ms)

        while True:
            remaining = budget - (self._clock() - started)
            observation = await self._check(condition, max(remaining, poll))
            polls += 1
            elapsed = self._clock() - started

            if observation.satisfied:
                log.debug(
                    "wait_satisfied",
                    condition=condition.description,
                    elapsed_ms=int(elapsed * 1000),
                    polls=polls,
                )
                return WaitResult(True, int(elapsed * 1000), polls, observation)

            if elapsed >= budget:
                break
            await self._sleep(min(poll, budget - elapsed))

        elapsed_ms = int((self._clock() - started) * 1000)
        if best_effort:
            log.info(
                "wait_best_effort_expired",
                condition=condition.description,
                timeout_ms=timeout_ms,
                last_state=observation.state,
            )
            return WaitResult(False, elapsed_ms, polls, observation)

        log.warning(
            "wait_timed_out",
            condition=condition.description,
            timeout_ms=timeout_ms,
            elapsed_ms=elapsed_ms,
            polls=polls,
            last_state=observation.state,
        )
        raise WaitTimeoutError(
            condition=condition.description,
            timeout_ms=timeout_ms,
            elapsed_ms=elapsed_ms,
            last_state=observation.state,
            polls=polls,
        )

    async def wait_for_value(
        self,
        action: Callable[[], Awaitable[T]],
        accept: Callable[[T], bool],
        timeout: Timeout = None,
        *,
        description: str = "value accepted",
    ) -> T:
        """Poll an action until ``accept`` holds for its result.

        Example:
            count = await waits.wait_for_value(
                action=lambda: contests.card_count(),
                accept=lambda n: n >= 1,
                description="at least one contest card",
            )
        """

        async def evaluate(_: Driver) -> Observation:
            result = await action()
            return Observation(accept(result), f"last result {result!r}", value=result)

        outcome = await self.wait_for(Predicate(evaluate, description), timeout)
        return outcome.value

    async def _check(self, condition: WaitCondition, limit: float) -> Observation:
        try:
            return await asyncio.wait_for(condition.check(self.driver), timeout=limit)
        except TransientDriverError as e:
            return Observation(False, f"transient driver error: {e}")
        except asyncio.TimeoutError:
            return Observation(False, f"check did not complete within {int(limit * 1000)}ms")
