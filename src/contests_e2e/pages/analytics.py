"""Analytics screen: charts, statistics and data export."""

from __future__ import annotations

import asyncio

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import DownloadInfo, Driver
from contests_e2e.pages.base import PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout, TimeoutTier

log = structlog.get_logger(__name__)

ANALYTICS = PageDefinition(
    name="Analytics Page",
    path="/analytics",
    locators={
        "accuracyChart": ".recharts-wrapper, .accuracy-chart",
        "sportBreakdown": ".sport-breakdown, .recharts-pie",
        "platformComparison": ".platform-comparison",
        "exportButton": 'button:has-text("Export")',
        "exportFormat": '.ant-dropdown-menu-item:has-text("{format}")',
        "statsCard": ".ant-statistic",
        "charts": ".recharts-wrapper",
        "tab": '.ant-tabs-tab:has-text("{name}")',
    },
)


class AnalyticsPage:
    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> AnalyticsPage:
        return cls(PageObject.from_settings(driver, ANALYTICS, settings))

    async def open(self) -> None:
        await self.ui.navigate()

    async def switch_tab(self, name: str) -> None:
        await self.ui.click("tab", name=name)
        await self.ui.wait_for_loading_complete()

    async def export_data(
        self, file_format: str = "CSV", timeout: Timeout = TimeoutTier.LONG
    ) -> DownloadInfo:
        """Export the analytics data and wait for the file download.

        The download listener is armed before the click that triggers it.
        """
        timeout_ms = self.ui.waits.tiers.resolve(timeout)
        download = asyncio.ensure_future(self.ui.driver.wait_for_download(timeout_ms))
        try:
            await self.ui.click("exportButton")
            if file_format != "CSV":
                await self.ui.click("exportFormat", format=file_format)
            info = await download
        finally:
            if not download.done():
                download.cancel()
        log.info("analytics_exported", format=file_format, filename=info.suggested_filename)
        return info

    async def expect_charts_loaded(self) -> None:
        await self.ui.expect_visible("charts", TimeoutTier.MEDIUM)

    async def expect_accuracy_chart_visible(self) -> None:
        await self.ui.expect_visible("accuracyChart")

    async def expect_sport_breakdown_visible(self) -> None:
        await self.ui.expect_visible("sportBreakdown")

    async def expect_stats_visible(self) -> None:
        await self.ui.expect_visible("statsCard")

    async def chart_count(self) -> int:
        return await self.ui.count("charts")

    async def expect_on_page(self, timeout: Timeout = None) -> None:
        await self.ui.expect_url("/analytics", timeout)
