"""
Test Runner

Runs one test body against resolved fixtures and reports the test's own
failure and the teardown failure separately, neither masking the other.
The pytest bridge drives the same ``finish_test`` step after pytest has run
the body itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from contests_e2e.core.exceptions import TeardownError
from contests_e2e.fixtures.graph import FixtureGraph, TestContext

log = structlog.get_logger(__name__)

TestBody = Callable[[dict[str, Any]], Awaitable[Any]]
FailureHook = Callable[[TestContext, BaseException], Awaitable[Any]]


@dataclass(frozen=True)
class TestOutcome:
    """What happened to one test.

    Attributes:
        test_id: Test identifier.
        error: Exception raised by fixture setup or by the body, if any.
        teardown_error: Aggregated teardown failure, if any.
    """

    __test__ = False

    test_id: str
    error: BaseException | None = None
    teardown_error: TeardownError | None = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.teardown_error is None


async def finish_test(
    graph: FixtureGraph,
    context: TestContext,
    error: BaseException | None = None,
    on_failure: FailureHook | None = None,
) -> TestOutcome:
    """Tear down a test's fixtures and build its outcome.

    When the test failed, ``on_failure`` runs first, while the fixtures are
    still alive. A failing hook is logged and does not change the outcome.
    """
    if error is not None and on_failure is not None:
        try:
            await on_failure(context, error)
        except Exception as e:
            log.warning("failure_hook_failed", error_type=type(e).__name__, error=str(e))

    teardown_error: TeardownError | None = None
    try:
        await graph.teardown(context)
    except TeardownError as e:
        teardown_error = e

    outcome = TestOutcome(test_id=context.test_id, error=error, teardown_error=teardown_error)
    log.info(
        "test_finished",
        passed=outcome.passed,
        teardown_failures=len(teardown_error.failures) if teardown_error else 0,
    )
    return outcome


async def run_test(
    graph: FixtureGraph,
    names: Iterable[str],
    body: TestBody,
    test_id: str,
    on_failure: FailureHook | None = None,
) -> TestOutcome:
    """Resolve ``names``, run ``body`` with them, then tear everything down.

    Teardown always runs, including after a setup failure part-way through
    the chain.
    """
    context = TestContext(test_id)
    error: BaseException | None = None

    with structlog.contextvars.bound_contextvars(test_id=test_id):
        log.info("test_started")
        try:
            fixtures = await graph.resolve(names, context)
            await body(fixtures)
        except Exception as e:
            error = e
            log.error("test_failed", error_type=type(e).__name__, error=str(e))

        return await finish_test(graph, context, error, on_failure)
