"""Bounded retry of single driver actions.

Transient driver failures (element mid re-render, not yet interactable)
are absorbed and retried after a fixed backoff. Anything else propagates
on the first occurrence, so a genuinely missing element fails fast instead
of burning the retry budget.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import (
    ActionError,
    AttemptTimeoutError,
    ConfigurationError,
    TransientDriverError,
    WaitTimeoutError,
)

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently an action is retried.

    Attributes:
        max_attempts: Total attempts including the first one.
        attempt_timeout_ms: Upper bound for a single attempt.
        backoff_ms: Delay between two attempts.
    """

    max_attempts: int = 3
    attempt_timeout_ms: int = 5_000
    backoff_ms: int = 250

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("RetryPolicy.max_attempts must be >= 1")
        if self.attempt_timeout_ms <= 0:
            raise ConfigurationError("RetryPolicy.attempt_timeout_ms must be positive")
        if self.backoff_ms < 0:
            raise ConfigurationError("RetryPolicy.backoff_ms must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            attempt_timeout_ms=settings.retry_attempt_timeout_ms,
            backoff_ms=settings.retry_backoff_ms,
        )


@dataclass(frozen=True)
class AttemptRecord:
    """One attempt of an action."""

    number: int
    elapsed_ms: int
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class ActionOutcome(Generic[T]):
    """A successful action with its attempt history."""

    description: str
    value: T
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def retried(self) -> bool:
        return len(self.attempts) > 1


class RetryableAction:
    """Runs actions under a ``RetryPolicy``.

    Example:
        retry = RetryableAction(RetryPolicy(max_attempts=3, backoff_ms=250))
        outcome = await retry.perform(
            lambda: driver.click(element), description="click saveButton"
        )
        assert outcome.attempt_count <= 3
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock

    async def perform(
        self,
        action: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
        *,
        description: str = "action",
    ) -> ActionOutcome[T]:
        """Run ``action`` until it succeeds or the policy is exhausted.

        Args:
            action: Zero-argument coroutine function performing one driver call.
            policy: Overrides the default policy for this call.
            description: Used in logs and in ``ActionError``.

        Returns:
            ActionOutcome with the action's return value and every attempt.

        Raises:
            ActionError: If every attempt failed with a transient error.
            Exception: Any non-transient error, unwrapped, on first occurrence.
        """
        policy = policy or self.policy
        attempts: list[AttemptRecord] = []

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_fixed(policy.backoff_ms / 1000),
            retry=retry_if_exception_type(TransientDriverError),
            before_sleep=self._log_retry(description, policy),
            sleep=self._sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    value = await self._attempt(action, policy, attempts)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            log.error(
                "action_failed",
                action=description,
                attempts=len(attempts),
                error=str(last_error),
            )
            raise ActionError(description, len(attempts), last_error) from last_error

        if len(attempts) > 1:
            log.info("action_recovered", action=description, attempts=len(attempts))
        return ActionOutcome(description=description, value=value, attempts=attempts)

    async def _attempt(
        self,
        action: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        attempts: list[AttemptRecord],
    ) -> T:
        number = len(attempts) + 1
        started = self._clock()

        def record(error: BaseException | None) -> None:
            elapsed_ms = int((self._clock() - started) * 1000)
            attempts.append(AttemptRecord(number=number, elapsed_ms=elapsed_ms, error=error))

        try:
            value = await asyncio.wait_for(action(), timeout=policy.attempt_timeout_ms / 1000)
        except WaitTimeoutError as e:
            # Raised by the action itself, not by the attempt bound
            record(e)
            raise
        except asyncio.TimeoutError as e:
            error = AttemptTimeoutError(
                f"Attempt {number} exceeded {policy.attempt_timeout_ms}ms"
            )
            record(error)
            raise error from e
        except Exception as e:
            record(e)
            raise

        record(None)
        return value

    @staticmethod
    def _log_retry(
        description: str, policy: RetryPolicy
    ) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log.warning(
                "action_retry",
                action=description,
                attempt=retry_state.attempt_number,
                max_attempts=policy.max_attempts,
                error_type=type(error).__name__,
                error=str(error),
                backoff_ms=policy.backoff_ms,
            )

        return before_sleep
