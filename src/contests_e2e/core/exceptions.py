"""E2E suite exception hierarchy.

This module defines the base exception class and the specialized exceptions
raised by the synchronization engine, the page objects and the fixture graph.

Several errors also inherit from a builtin so that callers can catch them
generically: ``WaitTimeoutError`` is a ``TimeoutError`` and
``ExpectationFailedError`` is an ``AssertionError``.
"""

from __future__ import annotations

from collections.abc import Sequence


class E2EError(Exception):
    """Base exception for all suite errors.

    All custom exceptions in the suite should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ConfigurationError(E2EError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("BASE_URL must be an http(s) URL")
    """

    pass


# =============================================================================
# Driver errors
# =============================================================================


class DriverError(E2EError):
    """Raised when a browser driver call fails.

    Attributes:
        selector: Element query involved in the failure, if any.
    """

    def __init__(self, message: str, selector: str | None = None) -> None:
        super().__init__(message)
        self.selector = selector


class TransientDriverError(DriverError):
    """A driver failure expected to resolve on its own shortly.

    Actions hitting one of these are retried by ``RetryableAction``.
    """

    pass


class ElementNotInteractableError(TransientDriverError):
    """Element exists but cannot receive input yet (hidden, disabled, covered)."""

    pass


class StaleElementError(TransientDriverError):
    """Element reference was detached from the DOM by a re-render."""

    pass


class AttemptTimeoutError(TransientDriverError):
    """A single action attempt exceeded its per-attempt timeout."""

    pass


class ElementNotFoundError(DriverError):
    """Element is absent from the page. Not retried."""

    pass


# =============================================================================
# Synchronization errors
# =============================================================================


class WaitTimeoutError(E2EError, TimeoutError):
    """Raised when a wait condition never became true within its budget.

    Attributes:
        condition: Human-readable description of the awaited condition.
        timeout_ms: Budget the wait was given.
        elapsed_ms: Time actually spent waiting.
        last_state: Last state observed before giving up.
        polls: Number of condition evaluations performed.

    Example:
        raise WaitTimeoutError(
            condition="element '.ant-spin' is hidden",
            timeout_ms=5000,
            elapsed_ms=5012,
            last_state="visible",
        )
    """

    def __init__(
        self,
        condition: str,
        timeout_ms: int,
        elapsed_ms: int,
        last_state: str | None,
        polls: int = 0,
    ) -> None:
        self.condition = condition
        self.timeout_ms = timeout_ms
        self.elapsed_ms = elapsed_ms
        self.last_state = last_state
        self.polls = polls
        super().__init__(self._describe())

    def _describe(self) -> str:
        return (
            f"Timed out after {self.elapsed_ms}ms (budget {self.timeout_ms}ms, "
            f"{self.polls} checks) waiting for: {self.condition}. "
            f"Last observed: {self.last_state or 'nothing'}"
        )


class ActionError(E2EError):
    """Raised when a retried action never succeeded.

    Attributes:
        action: Description of the action (e.g. "click saveButton on Contests Page").
        attempts: Number of attempts made.
        last_error: Error raised by the final attempt.
    """

    def __init__(self, action: str, attempts: int, last_error: BaseException | None) -> None:
        self.action = action
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{action} failed after {attempts} attempt(s). Last error: {last_error}"
        )


class ExpectationFailedError(E2EError, AssertionError):
    """Raised when an explicit expectation on the page failed.

    Attributes:
        expectation: The human-readable expectation, e.g.
            "saveButton should be visible on Contests Page".
    """

    def __init__(self, expectation: str, detail: str | None = None) -> None:
        self.expectation = expectation
        self.detail = detail
        message = expectation if detail is None else f"{expectation}: {detail}"
        super().__init__(message)


class ExpectationTimeoutError(WaitTimeoutError, ExpectationFailedError):
    """An expectation that failed because its wait condition timed out.

    Both a ``TimeoutError`` and an ``AssertionError``; the message leads with
    the expectation and follows with the wait diagnostics.
    """

    def __init__(self, expectation: str, cause: WaitTimeoutError) -> None:
        self.expectation = expectation
        self.detail = str(cause)
        self.condition = cause.condition
        self.timeout_ms = cause.timeout_ms
        self.elapsed_ms = cause.elapsed_ms
        self.last_state = cause.last_state
        self.polls = cause.polls
        # Skip the cooperative chain: ExpectationFailedError.__init__ would
        # overwrite the expectation with the formatted message.
        TimeoutError.__init__(self, self._describe())

    def _describe(self) -> str:
        return f"{self.expectation}. {super()._describe()}"


class VisualMismatchError(ExpectationFailedError):
    """Raised when a screenshot differs from its stored baseline.

    Attributes:
        snapshot: Snapshot name.
        baseline_path: Path of the stored baseline.
        actual_path: Path where the differing screenshot was written.
        diff_ratio: Share of pixels beyond the colour threshold, if measured.
    """

    def __init__(
        self,
        snapshot: str,
        baseline_path: str,
        actual_path: str,
        diff_ratio: float | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.baseline_path = baseline_path
        self.actual_path = actual_path
        self.diff_ratio = diff_ratio
        detail = f"baseline={baseline_path} actual={actual_path}"
        if diff_ratio is not None:
            detail = f"{diff_ratio:.2%} of pixels differ; {detail}"
        super().__init__(f"Screenshot '{snapshot}' should match its baseline", detail)


# =============================================================================
# Page object errors
# =============================================================================


class UnknownLocatorError(E2EError, LookupError):
    """Raised when a page object is asked for a locator it does not define."""

    def __init__(self, page: str, name: str) -> None:
        self.page = page
        self.name = name
        super().__init__(f"{page} has no locator named '{name}'")


class PageStateError(E2EError):
    """Raised when a page object is used from a terminal state."""

    pass


# =============================================================================
# Fixture graph errors
# =============================================================================


class FixtureError(E2EError):
    """Base class for fixture graph errors."""

    pass


class DuplicateFixtureError(FixtureError):
    """Raised when two fixtures are registered under the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Fixture '{name}' is already defined")


class CyclicDependencyError(FixtureError):
    """Raised when fixture dependencies form a cycle.

    Attributes:
        cycle: Fixture names along the cycle, first name repeated at the end.
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"Fixture dependency cycle: {' -> '.join(self.cycle)}")


class UnknownFixtureError(FixtureError):
    """Raised when a requested or depended-upon fixture has no definition.

    Attributes:
        name: The undefined fixture name.
        required_by: Fixture that declared the dependency, None if requested directly.
    """

    def __init__(self, name: str, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        where = f" (required by '{required_by}')" if required_by else ""
        super().__init__(f"Unknown fixture '{name}'{where}")


class FixtureSetupError(FixtureError):
    """Raised when a fixture's setup function fails. The cause is chained."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Setup of fixture '{name}' failed: {cause}")


class TeardownError(FixtureError):
    """Raised after all teardowns ran when one or more of them failed.

    Attributes:
        failures: (fixture name, exception) pairs in the order teardowns ran.
    """

    def __init__(self, failures: Sequence[tuple[str, BaseException]]) -> None:
        self.failures = list(failures)
        lines = "; ".join(f"{name}: {type(exc).__name__}: {exc}" for name, exc in self.failures)
        super().__init__(f"{len(self.failures)} fixture teardown(s) failed: {lines}")
