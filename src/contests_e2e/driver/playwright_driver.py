"""Playwright implementation of the driver contract.

Wraps a ``playwright.async_api.Page`` and translates Playwright errors into
the suite's driver error taxonomy so that retry decisions never depend on
Playwright internals.
"""

from __future__ import annotations

import io
import json
import time
from pathlib import Path
from typing import Any

import structlog
from PIL import Image, ImageChops, UnidentifiedImageError
from playwright.async_api import ElementHandle as PlaywrightElementHandle
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Route
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from contests_e2e.core.exceptions import (
    DriverError,
    ElementNotInteractableError,
    StaleElementError,
    VisualMismatchError,
    WaitTimeoutError,
)
from contests_e2e.driver.protocol import DownloadInfo

log = structlog.get_logger(__name__)

# Substrings of Playwright error messages, lowercased
_STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
    "frame was detached",
)
_NOT_INTERACTABLE_MARKERS = (
    "not visible",
    "not enabled",
    "not editable",
    "intercepts pointer events",
    "outside of the viewport",
    "not stable",
)


def translate_error(error: PlaywrightError, selector: str | None = None) -> DriverError:
    """Map a Playwright error onto the driver error taxonomy.

    Args:
        error: Error raised by Playwright.
        selector: Query the failing call was about, for context.

    Returns:
        A transient error for detached or not-yet-actionable elements,
        a plain ``DriverError`` otherwise.
    """
    message = str(error)
    lowered = message.lower()

    if any(marker in lowered for marker in _STALE_MARKERS):
        return StaleElementError(message, selector=selector)
    if isinstance(error, PlaywrightTimeoutError):
        # Actionability checks exhausted their timeout
        return ElementNotInteractableError(message, selector=selector)
    if any(marker in lowered for marker in _NOT_INTERACTABLE_MARKERS):
        return ElementNotInteractableError(message, selector=selector)
    return DriverError(message, selector=selector)


def diff_ratio(baseline: bytes, actual: bytes, threshold: float) -> float:
    """Share of pixels whose colour distance exceeds ``threshold``.

    The distance of a pixel is its largest channel difference scaled to
    0..1, so anti-aliasing noise stays under a small threshold. Images of
    different sizes, or bytes that are not an image, differ completely.
    """
    try:
        with Image.open(io.BytesIO(baseline)) as expected_image:
            expected = expected_image.convert("RGB")
        with Image.open(io.BytesIO(actual)) as actual_image:
            got = actual_image.convert("RGB")
    except UnidentifiedImageError:
        return 1.0
    if expected.size != got.size:
        return 1.0

    red, green, blue = ImageChops.difference(expected, got).split()
    distance = ImageChops.lighter(ImageChops.lighter(red, green), blue)
    cutoff = int(threshold * 255)
    differing = sum(distance.histogram()[cutoff + 1 :])
    return differing / (expected.width * expected.height)


class PlaywrightElement:
    """Element handle bound to the selector that produced it."""

    def __init__(self, handle: PlaywrightElementHandle, selector: str) -> None:
        self.handle = handle
        self.selector = selector

    async def is_visible(self) -> bool:
        try:
            return await self.handle.is_visible()
        except PlaywrightError as e:
            raise translate_error(e, self.selector) from e

    async def is_enabled(self) -> bool:
        try:
            return await self.handle.is_enabled()
        except PlaywrightError as e:
            raise translate_error(e, self.selector) from e

    async def text_content(self) -> str | None:
        try:
            return await self.handle.text_content()
        except PlaywrightError as e:
            raise translate_error(e, self.selector) from e

    def __repr__(self) -> str:
        return f"PlaywrightElement({self.selector!r})"


class PlaywrightDriver:
    """Driver over one Playwright page.

    Attributes:
        page: The wrapped Playwright page.
        action_timeout_ms: Timeout Playwright applies to one click/fill.
        navigation_timeout_ms: Timeout for ``page.goto``.
        snapshot_dir: Directory holding screenshot baselines.
        update_snapshots: Overwrite baselines instead of comparing.
        snapshot_threshold: Per-pixel colour distance (0..1) treated as equal.
        snapshot_max_diff_ratio: Share of differing pixels still accepted.
    """

    def __init__(
        self,
        page: Page,
        action_timeout_ms: int = 5_000,
        navigation_timeout_ms: int = 60_000,
        snapshot_dir: str | Path = "tests/visual/__snapshots__",
        update_snapshots: bool = False,
        snapshot_threshold: float = 0.2,
        snapshot_max_diff_ratio: float = 0.0,
    ) -> None:
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.snapshot_dir = Path(snapshot_dir)
        self.update_snapshots = update_snapshots
        self.snapshot_threshold = snapshot_threshold
        self.snapshot_max_diff_ratio = snapshot_max_diff_ratio

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def navigate(self, url: str) -> None:
        started = time.monotonic()
        try:
            await self.page.goto(
                url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(
                condition=f"navigation to {url} completes",
                timeout_ms=self.navigation_timeout_ms,
                elapsed_ms=int((time.monotonic() - started) * 1000),
                last_state=str(e).splitlines()[0],
            ) from e
        except PlaywrightError as e:
            raise DriverError(f"Navigation to {url} failed: {e}") from e
        log.debug("driver_navigated", url=url)

    async def current_url(self) -> str:
        return self.page.url

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        started = time.monotonic()
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(
                condition="network is idle",
                timeout_ms=timeout_ms,
                elapsed_ms=int((time.monotonic() - started) * 1000),
                last_state="requests still in flight",
            ) from e

    # -------------------------------------------------------------------------
    # Elements
    # -------------------------------------------------------------------------

    async def query(self, selector: str) -> PlaywrightElement | None:
        try:
            handle = await self.page.query_selector(selector)
        except PlaywrightError as e:
            raise translate_error(e, selector) from e
        if handle is None:
            return None
        return PlaywrightElement(handle, selector)

    async def count(self, selector: str) -> int:
        try:
            handles = await self.page.query_selector_all(selector)
        except PlaywrightError as e:
            raise translate_error(e, selector) from e
        return len(handles)

    async def click(self, element: PlaywrightElement) -> None:
        try:
            await element.handle.click(timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise translate_error(e, element.selector) from e

    async def fill(self, element: PlaywrightElement, text: str) -> None:
        try:
            await element.handle.fill(text, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise translate_error(e, element.selector) from e

    # -------------------------------------------------------------------------
    # Downloads, storage, routing
    # -------------------------------------------------------------------------

    async def wait_for_download(self, timeout_ms: int) -> DownloadInfo:
        started = time.monotonic()
        try:
            download = await self.page.wait_for_event("download", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(
                condition="a file download starts",
                timeout_ms=timeout_ms,
                elapsed_ms=int((time.monotonic() - started) * 1000),
                last_state="no download event",
            ) from e
        path = await download.path()
        log.info("driver_download_finished", filename=download.suggested_filename)
        return DownloadInfo(
            suggested_filename=download.suggested_filename,
            path=str(path) if path else None,
        )

    async def set_viewport(self, width: int, height: int) -> None:
        try:
            await self.page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as e:
            raise DriverError(f"Resizing the viewport to {width}x{height} failed: {e}") from e

    async def clear_storage(self) -> None:
        try:
            await self.page.evaluate("() => localStorage.clear()")
        except PlaywrightError as e:
            raise DriverError(f"Clearing local storage failed: {e}") from e

    async def route_json(self, pattern: str, payload: Any, status: int = 200) -> None:
        body = json.dumps(payload)

        async def fulfill(route: Route) -> None:
            await route.fulfill(status=status, content_type="application/json", body=body)

        await self.page.route(pattern, fulfill)
        log.debug("driver_route_installed", pattern=pattern, status=status)

    # -------------------------------------------------------------------------
    # Visual regression
    # -------------------------------------------------------------------------

    async def screenshot_compare(self, name: str) -> None:
        """Compare a full-page screenshot against the stored baseline.

        A missing baseline is recorded instead of compared, as is every
        screenshot when ``update_snapshots`` is set.

        Raises:
            VisualMismatchError: If the screenshot differs from the baseline.
        """
        actual = await self.page.screenshot(full_page=True, animations="disabled")
        baseline = self.snapshot_dir / f"{name}.png"

        if self.update_snapshots or not baseline.exists():
            baseline.parent.mkdir(parents=True, exist_ok=True)
            baseline.write_bytes(actual)
            log.info("snapshot_baseline_written", snapshot=name, path=str(baseline))
            return

        expected = baseline.read_bytes()
        if expected == actual:
            return

        ratio = diff_ratio(expected, actual, self.snapshot_threshold)
        if ratio <= self.snapshot_max_diff_ratio:
            log.debug("snapshot_within_tolerance", snapshot=name, diff_ratio=ratio)
            return

        actual_path = baseline.with_name(f"{name}-actual.png")
        actual_path.write_bytes(actual)
        log.warning(
            "snapshot_mismatch", snapshot=name, diff_ratio=ratio, actual=str(actual_path)
        )
        raise VisualMismatchError(name, str(baseline), str(actual_path), diff_ratio=ratio)
