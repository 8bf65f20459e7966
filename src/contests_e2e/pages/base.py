"""Page object capability shared by every screen and component.

A screen is described by a ``PageDefinition`` (name, URL path, locator
table). ``PageObject`` binds that definition to a driver, a ``WaitEngine``
and a ``RetryableAction``; concrete screens hold one as ``self.ui`` and add
their own flows on top of it.

Every action waits for its element first and then retries the driver call on
transient failures. Every expectation is a bounded wait whose failure reads
like "<locator> should be visible on <page>".
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import (
    ConfigurationError,
    ElementNotFoundError,
    ElementNotInteractableError,
    ExpectationFailedError,
    ExpectationTimeoutError,
    PageStateError,
    StaleElementError,
    UnknownLocatorError,
    WaitTimeoutError,
)
from contests_e2e.driver.protocol import Driver, ElementHandle
from contests_e2e.sync.conditions import (
    WaitCondition,
    all_of,
    hidden,
    network_idle,
    snapshot,
    text_contains,
    url_equals,
    url_matches,
    visible,
)
from contests_e2e.sync.retry import RetryableAction, RetryPolicy
from contests_e2e.sync.wait import Timeout, TimeoutTier, WaitEngine, WaitResult

log = structlog.get_logger(__name__)

# Ant Design elements present on every screen
COMMON_LOCATORS: dict[str, str] = {
    "loadingSpinner": ".ant-spin",
    "modal": ".ant-modal",
    "modalTitle": ".ant-modal-title",
    "modalOk": ".ant-modal-footer button.ant-btn-primary",
    "modalCancel": ".ant-modal-footer button:not(.ant-btn-primary)",
    "modalClose": ".ant-modal-close",
    "notification": ".ant-notification-notice",
    "notificationClose": ".ant-notification-notice-close",
}

NOTIFICATION_SELECTOR = ".ant-notification-notice-{kind}"
NOTIFICATION_CAPTURE = {
    "message": ".ant-notification-notice-message",
    "description": ".ant-notification-notice-description",
}


class PageState(str, Enum):
    """Lifecycle of a page object."""

    NOT_STARTED = "not_started"
    NAVIGATING = "navigating"
    SETTLED = "settled"
    ACTING = "acting"
    ASSERTING = "asserting"
    DONE = "done"  # Terminal
    TIMED_OUT = "timed_out"
    FAILED = "failed"


# Operation phases end in SETTLED, TIMED_OUT or FAILED. The last two end the
# operation, not the page: the next operation may start from them.
_NEXT_OPERATION = [
    PageState.NAVIGATING,
    PageState.ACTING,
    PageState.ASSERTING,
    PageState.DONE,
]
_OPERATION_OUTCOMES = [PageState.SETTLED, PageState.TIMED_OUT, PageState.FAILED]

PAGE_TRANSITIONS: dict[PageState, list[PageState]] = {
    # A page reached by redirect may be used without navigate()
    PageState.NOT_STARTED: _NEXT_OPERATION,
    PageState.NAVIGATING: _OPERATION_OUTCOMES,
    PageState.SETTLED: _NEXT_OPERATION,
    PageState.ACTING: _OPERATION_OUTCOMES,
    PageState.ASSERTING: _OPERATION_OUTCOMES,
    PageState.TIMED_OUT: _NEXT_OPERATION,
    PageState.FAILED: _NEXT_OPERATION,
    PageState.DONE: [],
}

TERMINAL_STATES = frozenset({PageState.DONE})
OPERATION_PHASES = frozenset({PageState.NAVIGATING, PageState.ACTING, PageState.ASSERTING})


class NotificationKind(str, Enum):
    """Ant Design notification types."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class NotificationSnapshot:
    """Texts of a notification, read in the tick it was first seen visible."""

    kind: NotificationKind
    message: str
    description: str
    elapsed_ms: int


@dataclass(frozen=True)
class PageDefinition:
    """Static description of a screen.

    Attributes:
        name: Display name used in expectation messages.
        path: URL path relative to the base URL, None for components.
        locators: Locator name → selector. Selectors may contain
            ``str.format`` fields filled by ``locate(name, **params)``.
    """

    name: str
    path: str | None
    locators: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ElementQuery:
    """A named selector bound to a driver. Resolving it never waits."""

    driver: Driver
    name: str
    selector: str
    page: str

    async def resolve(self) -> ElementHandle | None:
        return await self.driver.query(self.selector)

    def __str__(self) -> str:
        return f"{self.name} on {self.page}"


@runtime_checkable
class PageCapability(Protocol):
    """Operations every page object offers to test code."""

    async def navigate(self) -> None: ...

    def locate(self, name: str, **params: object) -> ElementQuery: ...

    async def click(self, name: str, timeout: Timeout = None, **params: object) -> None: ...

    async def fill(
        self, name: str, value: str, timeout: Timeout = None, **params: object
    ) -> None: ...

    async def expect_visible(
        self, name: str, timeout: Timeout = None, **params: object
    ) -> None: ...

    async def expect_hidden(
        self, name: str, timeout: Timeout = None, **params: object
    ) -> None: ...

    async def wait_for_notification(
        self, kind: NotificationKind | str, timeout: Timeout = None
    ) -> NotificationSnapshot: ...


class PageObject:
    """Synchronized operations over one screen's locators.

    Attributes:
        driver: Live driver owned by the current test.
        definition: Screen name, path and locators.
        base_url: Prefix for ``definition.path``.
        waits: Engine used by waits and expectations.
        retry: Runner used by clicks and fills.
        retry_policy: Policy applied to every action of this page.

    Example:
        contests = PageObject.from_settings(driver, CONTESTS, settings)
        await contests.navigate()
        await contests.click("createContestButton")
        await contests.expect_visible("modal", TimeoutTier.SHORT)
    """

    def __init__(
        self,
        driver: Driver,
        definition: PageDefinition,
        *,
        base_url: str = "",
        waits: WaitEngine | None = None,
        retry: RetryableAction | None = None,
        retry_policy: RetryPolicy | None = None,
        settle_timeout: Timeout = TimeoutTier.LONG,
    ) -> None:
        self.driver = driver
        self.definition = definition
        self.base_url = base_url.rstrip("/")
        self.waits = waits or WaitEngine(driver)
        self.retry = retry or RetryableAction(retry_policy)
        self.retry_policy = retry_policy or self.retry.policy
        self.settle_timeout = settle_timeout
        self._locators = {**COMMON_LOCATORS, **definition.locators}
        self._state = PageState.NOT_STARTED
        self._last_outcome: PageState | None = None

    @classmethod
    def from_settings(
        cls, driver: Driver, definition: PageDefinition, settings: Settings
    ) -> PageObject:
        return cls(
            driver,
            definition,
            base_url=settings.base_url,
            waits=WaitEngine.from_settings(driver, settings),
            retry_policy=RetryPolicy.from_settings(settings),
        )

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def last_outcome(self) -> PageState | None:
        """SETTLED, TIMED_OUT or FAILED for the latest operation, None before any."""
        return self._last_outcome

    @property
    def url(self) -> str:
        if self.definition.path is None:
            raise ConfigurationError(f"{self.name} has no URL path")
        return f"{self.base_url}{self.definition.path}"

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def navigate(self) -> None:
        """Go to this page's URL and block until it is settled.

        Settled means the network is idle and no loading spinner is visible,
        observed in the same poll tick.
        """
        url = self.url
        async with self._phase(PageState.NAVIGATING):
            await self.driver.navigate(url)
            await self.waits.wait_for(self.settled_condition(), self.settle_timeout)
        log.info("page_navigated", page=self.name, url=url)

    def settled_condition(self) -> WaitCondition:
        return all_of(
            network_idle(),
            hidden(self._locators["loadingSpinner"], label="loading spinner"),
        )

    # -------------------------------------------------------------------------
    # Locators
    # -------------------------------------------------------------------------

    def locate(self, name: str, **params: object) -> ElementQuery:
        """Resolve a locator name to an element query on the current page."""
        try:
            template = self._locators[name]
        except KeyError:
            raise UnknownLocatorError(self.name, name) from None
        selector = template.format(**params) if params else template
        return ElementQuery(driver=self.driver, name=name, selector=selector, page=self.name)

    async def count(self, name: str, **params: object) -> int:
        """Number of elements currently matching a locator. Does not wait."""
        return await self.driver.count(self.locate(name, **params).selector)

    async def read_text(self, name: str, **params: object) -> str:
        """Text of an element right now. Does not wait.

        Raises:
            ElementNotFoundError: If no element matches.
        """
        query = self.locate(name, **params)
        element = await query.resolve()
        if element is None:
            raise ElementNotFoundError(f"{query} is not on the page", selector=query.selector)
        return ((await element.text_content()) or "").strip()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def click(self, name: str, timeout: Timeout = None, **params: object) -> None:
        """Wait for an element to be visible, then click it with retry.

        A disabled element is not interactable yet; the click is retried.
        """
        query = self.locate(name, **params)
        async with self._phase(PageState.ACTING):
            await self.waits.wait_for(visible(query.selector, label=str(query)), timeout)

            async def click_once() -> None:
                element = await self._require(query)
                await self.driver.click(element)

            await self.retry.perform(
                click_once, self.retry_policy, description=f"click {query}"
            )

    async def fill(
        self, name: str, value: str, timeout: Timeout = None, **params: object
    ) -> None:
        """Wait for an input to be visible, then fill it with retry."""
        query = self.locate(name, **params)
        async with self._phase(PageState.ACTING):
            await self.waits.wait_for(visible(query.selector, label=str(query)), timeout)

            async def fill_once() -> None:
                element = await self._require(query)
                await self.driver.fill(element, value)

            await self.retry.perform(fill_once, self.retry_policy, description=f"fill {query}")

    # -------------------------------------------------------------------------
    # Expectations
    # -------------------------------------------------------------------------

    async def expect_visible(self, name: str, timeout: Timeout = None, **params: object) -> None:
        query = self.locate(name, **params)
        await self._expect(
            visible(query.selector, label=str(query)),
            f"{name} should be visible on {self.name}",
            timeout,
        )

    async def expect_hidden(self, name: str, timeout: Timeout = None, **params: object) -> None:
        query = self.locate(name, **params)
        await self._expect(
            hidden(query.selector, label=str(query)),
            f"{name} should be hidden on {self.name}",
            timeout,
        )

    async def expect_text(
        self, name: str, text: str, timeout: Timeout = None, **params: object
    ) -> None:
        query = self.locate(name, **params)
        await self._expect(
            text_contains(query.selector, text, label=str(query)),
            f"{name} should contain {text!r} on {self.name}",
            timeout,
        )

    async def expect_url(self, expected: str | re.Pattern[str], timeout: Timeout = None) -> None:
        """Expect the current URL to equal a path/URL, or to match a pattern."""
        if isinstance(expected, re.Pattern):
            condition, target = url_matches(expected), f"/{expected.pattern}/"
        else:
            condition, target = url_equals(expected), expected
        await self._expect(condition, f"{self.name} should be at {target}", timeout)

    async def expect_screenshot(self, name: str) -> None:
        """Compare the page against a stored baseline."""
        async with self._phase(PageState.ASSERTING):
            await self.driver.screenshot_compare(name)

    # -------------------------------------------------------------------------
    # Transient elements
    # -------------------------------------------------------------------------

    async def wait_for_notification(
        self, kind: NotificationKind | str, timeout: Timeout = None
    ) -> NotificationSnapshot:
        """Wait for an auto-dismissing notification and capture its texts.

        The texts are read in the same tick the notification is seen visible,
        so the snapshot stays valid after the notification closes. A
        notification shown for less than one poll interval can be missed.

        Raises:
            WaitTimeoutError: If no notification of this kind was seen.
        """
        async with self._phase(PageState.ASSERTING):
            return await self._capture_notification(NotificationKind(kind), timeout)

    async def expect_notification(
        self,
        kind: NotificationKind | str,
        message: str | None = None,
        timeout: Timeout = None,
    ) -> NotificationSnapshot:
        """Expect a notification, optionally containing ``message``."""
        kind = NotificationKind(kind)
        expectation = f"{kind.value} notification should appear on {self.name}"
        async with self._phase(PageState.ASSERTING):
            try:
                seen = await self._capture_notification(kind, timeout)
            except WaitTimeoutError as e:
                raise ExpectationTimeoutError(expectation, e) from e
            if message is not None and message not in f"{seen.message} {seen.description}":
                raise ExpectationFailedError(
                    f"{kind.value} notification on {self.name} should contain {message!r}",
                    f"got message={seen.message!r} description={seen.description!r}",
                )
        return seen

    async def wait_for_loading_complete(self, timeout: Timeout = None) -> WaitResult:
        """Best-effort wait for the loading spinner to go away.

        Never raises on timeout; a spinner that stays up is logged and the
        caller continues.
        """
        return await self.waits.wait_for(
            hidden(self._locators["loadingSpinner"], label=f"loading spinner on {self.name}"),
            timeout,
            best_effort=True,
        )

    def done(self) -> None:
        """Mark the page as finished; further operations raise ``PageStateError``."""
        self._transition(PageState.DONE)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _expect(self, condition: WaitCondition, expectation: str, timeout: Timeout) -> None:
        async with self._phase(PageState.ASSERTING):
            try:
                await self.waits.wait_for(condition, timeout)
            except WaitTimeoutError as e:
                raise ExpectationTimeoutError(expectation, e) from e

    async def _capture_notification(
        self, kind: NotificationKind, timeout: Timeout
    ) -> NotificationSnapshot:
        condition = snapshot(
            NOTIFICATION_SELECTOR.format(kind=kind.value),
            NOTIFICATION_CAPTURE,
            label=f"{kind.value} notification",
        )
        result = await self.waits.wait_for(condition, timeout)
        texts = result.value
        log.debug("notification_seen", page=self.name, kind=kind.value, message=texts["message"])
        return NotificationSnapshot(
            kind=kind,
            message=texts["message"],
            description=texts["description"],
            elapsed_ms=result.elapsed_ms,
        )

    async def _require(self, query: ElementQuery) -> ElementHandle:
        element = await query.resolve()
        if element is None:
            # Was visible a moment ago: detached by a re-render
            raise StaleElementError(f"{query} detached after becoming visible", query.selector)
        if not await element.is_enabled():
            raise ElementNotInteractableError(f"{query} is disabled", query.selector)
        return element

    @asynccontextmanager
    async def _phase(self, phase: PageState) -> AsyncIterator[None]:
        """Run one operation. Its outcome is recorded; only DONE ends the page."""
        self._transition(phase)
        try:
            yield
        except WaitTimeoutError:
            self._finish(PageState.TIMED_OUT)
            raise
        except Exception:
            self._finish(PageState.FAILED)
            raise
        self._finish(PageState.SETTLED)

    def _finish(self, outcome: PageState) -> None:
        self._transition(outcome)
        self._last_outcome = outcome

    def _transition(self, target: PageState) -> None:
        if self._state in TERMINAL_STATES:
            raise PageStateError(
                f"{self.name} is {self._state.value}; cannot move to {target.value}. "
                "Use a new page object."
            )
        if target not in PAGE_TRANSITIONS[self._state]:
            raise PageStateError(
                f"{self.name}: invalid transition {self._state.value} -> {target.value}"
            )
        log.debug("page_state", page=self.name, source=self._state.value, target=target.value)
        self._state = target

    def __repr__(self) -> str:
        return f"<PageObject {self.name} state={self._state.value}>"
