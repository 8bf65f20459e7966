"""Browser session lifecycle: playwright → browser → context → page."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from contests_e2e.config.settings import Settings
from contests_e2e.driver.playwright_driver import PlaywrightDriver

log = structlog.get_logger(__name__)


def artifact_stem(test_id: str) -> str:
    """File-system safe name for a test id such as ``tests/e2e/test_auth.py::test_login``."""
    return re.sub(r"[^\w.-]+", "_", test_id).strip("_") or "test"


@dataclass
class BrowserSession:
    """One isolated browser context with a single page, owned by one test.

    When tracing is on, the trace is only written out for failed tests
    (``save_failure_artifacts``); ``close`` discards it otherwise.
    """

    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page
    driver: PlaywrightDriver
    artifacts_dir: Path = field(default_factory=lambda: Path("test-results"))
    screenshot_on_failure: bool = True
    tracing: bool = False

    @classmethod
    async def start(cls, settings: Settings) -> BrowserSession:
        """Launch a browser and open a fresh context and page."""
        playwright = await async_playwright().start()
        try:
            browser_type = getattr(playwright, settings.browser_name)
            browser = await browser_type.launch(
                headless=settings.headless, slow_mo=settings.slow_mo_ms
            )
            context = await browser.new_context(
                base_url=settings.base_url,
                viewport={
                    "width": settings.viewport_width,
                    "height": settings.viewport_height,
                },
                ignore_https_errors=True,
            )
            if settings.trace_on_failure:
                await context.tracing.start(screenshots=True, snapshots=True)
            page = await context.new_page()
        except BaseException:
            await playwright.stop()
            raise

        page.set_default_timeout(settings.timeout_long_ms)
        page.set_default_navigation_timeout(settings.navigation_timeout_ms)
        driver = PlaywrightDriver(
            page,
            action_timeout_ms=settings.retry_attempt_timeout_ms,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            snapshot_dir=settings.snapshot_dir,
            update_snapshots=settings.update_snapshots,
            snapshot_threshold=settings.snapshot_threshold,
            snapshot_max_diff_ratio=settings.snapshot_max_diff_ratio,
        )
        log.info(
            "browser_session_started",
            browser=settings.browser_name,
            headless=settings.headless,
            tracing=settings.trace_on_failure,
        )
        return cls(
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
            driver=driver,
            artifacts_dir=Path(settings.artifacts_dir),
            screenshot_on_failure=settings.screenshot_on_failure,
            tracing=settings.trace_on_failure,
        )

    async def save_failure_artifacts(self, test_id: str) -> list[Path]:
        """Write a full-page screenshot and the trace of a failed test.

        Each artifact is attempted independently; one that cannot be written
        is logged and skipped.

        Returns:
            Paths of the artifacts written.
        """
        stem = artifact_stem(test_id)
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        saved: list[Path] = []

        if self.screenshot_on_failure:
            path = self.artifacts_dir / f"{stem}.png"
            try:
                await self.page.screenshot(path=str(path), full_page=True)
                saved.append(path)
            except PlaywrightError as e:
                log.warning("failure_screenshot_failed", path=str(path), error=str(e))

        if self.tracing:
            path = self.artifacts_dir / f"{stem}.zip"
            self.tracing = False
            try:
                await self.context.tracing.stop(path=str(path))
                saved.append(path)
            except PlaywrightError as e:
                log.warning("failure_trace_failed", path=str(path), error=str(e))

        log.info("failure_artifacts_saved", paths=[str(p) for p in saved])
        return saved

    async def close(self) -> None:
        """Close context, browser and playwright, in that order.

        An unsaved trace is stopped and dropped first.
        """
        try:
            if self.tracing:
                self.tracing = False
                await self.context.tracing.stop()
            await self.context.close()
        finally:
            try:
                await self.browser.close()
            finally:
                await self.playwright.stop()
        log.info("browser_session_closed")
