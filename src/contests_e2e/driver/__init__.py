"""Browser driver contract and its Playwright implementation."""

from contests_e2e.driver.playwright_driver import PlaywrightDriver, PlaywrightElement
from contests_e2e.driver.protocol import DownloadInfo, Driver, ElementHandle
from contests_e2e.driver.session import BrowserSession

__all__ = [
    "BrowserSession",
    "DownloadInfo",
    "Driver",
    "ElementHandle",
    "PlaywrightDriver",
    "PlaywrightElement",
]
