"""Wait conditions evaluated against the driver.

A condition is checked once per poll tick and reports an ``Observation``:
whether it holds, what was seen (for timeout diagnostics) and, optionally,
a value captured in the same tick.

Usage:
    spinner_gone = hidden(".ant-spin")
    settled = all_of(spinner_gone, network_idle())
    await waits.wait_for(settled, TimeoutTier.MEDIUM)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from contests_e2e.core.exceptions import WaitTimeoutError
from contests_e2e.driver.protocol import Driver


@dataclass(frozen=True)
class Observation:
    """Result of evaluating a condition once."""

    satisfied: bool
    state: str
    value: Any = None


class WaitCondition(ABC):
    """A predicate over the current driver state."""

    description: str = "condition"

    @abstractmethod
    async def check(self, driver: Driver) -> Observation:
        """Evaluate the condition once. Must not wait."""

    def __and__(self, other: WaitCondition) -> AllOf:
        return all_of(self, other)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.description}>"


class ElementVisible(WaitCondition):
    """Element matching a selector is present and visible."""

    def __init__(self, selector: str, label: str | None = None) -> None:
        self.selector = selector
        self.description = f"{label or repr(selector)} is visible"

    async def check(self, driver: Driver) -> Observation:
        element = await driver.query(self.selector)
        if element is None:
            return Observation(False, "element absent")
        if await element.is_visible():
            return Observation(True, "visible")
        return Observation(False, "element present but hidden")


class ElementHidden(WaitCondition):
    """Element matching a selector is absent or not visible."""

    def __init__(self, selector: str, label: str | None = None) -> None:
        self.selector = selector
        self.description = f"{label or repr(selector)} is hidden"

    async def check(self, driver: Driver) -> Observation:
        element = await driver.query(self.selector)
        if element is None:
            return Observation(True, "element absent")
        if await element.is_visible():
            return Observation(False, "still visible")
        return Observation(True, "present but hidden")


class ElementTextContains(WaitCondition):
    """Element is visible and its text contains a substring."""

    def __init__(self, selector: str, text: str, label: str | None = None) -> None:
        self.selector = selector
        self.text = text
        self.description = f"{label or repr(selector)} contains text {text!r}"

    async def check(self, driver: Driver) -> Observation:
        element = await driver.query(self.selector)
        if element is None:
            return Observation(False, "element absent")
        content = (await element.text_content()) or ""
        if self.text in content:
            return Observation(True, f"text {content!r}", value=content)
        return Observation(False, f"text {content!r}")


class ElementSnapshot(WaitCondition):
    """Element is visible; texts of the given sub-selectors are read in the same tick.

    The captured texts are returned as the observation value, so callers never
    re-query an element that may have disappeared since.
    """

    def __init__(
        self,
        selector: str,
        capture: Mapping[str, str],
        label: str | None = None,
    ) -> None:
        self.selector = selector
        self.capture = dict(capture)
        self.description = f"{label or repr(selector)} is visible"

    async def check(self, driver: Driver) -> Observation:
        element = await driver.query(self.selector)
        if element is None:
            return Observation(False, "element absent")
        if not await element.is_visible():
            return Observation(False, "element present but hidden")

        texts: dict[str, str] = {}
        for key, sub_selector in self.capture.items():
            part = await driver.query(f"{self.selector} {sub_selector}")
            texts[key] = ((await part.text_content()) or "").strip() if part else ""
        return Observation(True, "visible", value=texts)


class UrlEquals(WaitCondition):
    """Current URL equals the expected one.

    An expected value starting with "/" is compared against the URL path only.
    """

    def __init__(self, expected: str) -> None:
        self.expected = expected
        self.description = f"URL equals {expected!r}"

    async def check(self, driver: Driver) -> Observation:
        url = await driver.current_url()
        actual = urlparse(url).path if self.expected.startswith("/") else url
        return Observation(actual.rstrip("/") == self.expected.rstrip("/"), f"URL {url!r}")


class UrlMatches(WaitCondition):
    """Current URL matches a regular expression (searched, not anchored)."""

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.description = f"URL matches /{self.pattern.pattern}/"

    async def check(self, driver: Driver) -> Observation:
        url = await driver.current_url()
        return Observation(self.pattern.search(url) is not None, f"URL {url!r}")


class NetworkIdle(WaitCondition):
    """No network activity for ``idle_ms``, as reported by the driver."""

    def __init__(self, idle_ms: int = 500) -> None:
        self.idle_ms = idle_ms
        self.description = f"network idle for {idle_ms}ms"

    async def check(self, driver: Driver) -> Observation:
        try:
            await driver.wait_for_network_idle(self.idle_ms)
        except WaitTimeoutError:
            return Observation(False, "requests in flight")
        return Observation(True, "network idle")


class Predicate(WaitCondition):
    """Arbitrary async predicate over the driver.

    The callable may return a bool, or an ``Observation`` for richer diagnostics.
    """

    def __init__(
        self,
        fn: Callable[[Driver], Awaitable[bool | Observation]],
        description: str,
    ) -> None:
        self.fn = fn
        self.description = description

    async def check(self, driver: Driver) -> Observation:
        result = await self.fn(driver)
        if isinstance(result, Observation):
            return result
        return Observation(bool(result), "true" if result else "false")


class AllOf(WaitCondition):
    """Logical AND, every sub-condition evaluated in the same tick."""

    def __init__(self, conditions: tuple[WaitCondition, ...]) -> None:
        self.conditions = conditions
        self.description = " AND ".join(f"({c.description})" for c in conditions)

    async def check(self, driver: Driver) -> Observation:
        # No short-circuit: the timeout message reports every part
        observations = [await condition.check(driver) for condition in self.conditions]
        state = "; ".join(
            f"{c.description}: {'ok' if o.satisfied else o.state}"
            for c, o in zip(self.conditions, observations)
        )
        return Observation(
            all(o.satisfied for o in observations),
            state,
            value=tuple(o.value for o in observations),
        )


# =============================================================================
# Constructors
# =============================================================================


def visible(selector: str, label: str | None = None) -> ElementVisible:
    return ElementVisible(selector, label)


def hidden(selector: str, label: str | None = None) -> ElementHidden:
    return ElementHidden(selector, label)


def text_contains(selector: str, text: str, label: str | None = None) -> ElementTextContains:
    return ElementTextContains(selector, text, label)


def snapshot(
    selector: str, capture: Mapping[str, str], label: str | None = None
) -> ElementSnapshot:
    return ElementSnapshot(selector, capture, label)


def url_equals(expected: str) -> UrlEquals:
    return UrlEquals(expected)


def url_matches(pattern: str | re.Pattern[str]) -> UrlMatches:
    return UrlMatches(pattern)


def network_idle(idle_ms: int = 500) -> NetworkIdle:
    return NetworkIdle(idle_ms)


def predicate(
    fn: Callable[[Driver], Awaitable[bool | Observation]], description: str
) -> Predicate:
    return Predicate(fn, description)


def all_of(*conditions: WaitCondition) -> AllOf:
    """Combine conditions; nested ``AllOf`` are flattened."""
    if not conditions:
        raise ValueError("all_of() needs at least one condition")
    flat: list[WaitCondition] = []
    for condition in conditions:
        if isinstance(condition, AllOf):
            flat.extend(condition.conditions)
        else:
            flat.append(condition)
    return AllOf(tuple(flat))
