"""Ant Design notifications (toasts).

Notifications dismiss themselves after a few seconds, so every wait here
returns a ``NotificationSnapshot`` captured when the toast was seen rather
than a handle to re-read later.
"""

from __future__ import annotations

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import (
    NotificationKind,
    NotificationSnapshot,
    PageDefinition,
    PageObject,
)
from contests_e2e.sync.wait import Timeout

NOTIFICATIONS = PageDefinition(name="Notifications", path=None)


class NotificationComponent:
    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> NotificationComponent:
        return cls(PageObject.from_settings(driver, NOTIFICATIONS, settings))

    async def wait_for(
        self, kind: NotificationKind | str = NotificationKind.SUCCESS, timeout: Timeout = None
    ) -> NotificationSnapshot:
        return await self.ui.wait_for_notification(kind, timeout)

    async def expect_success(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.SUCCESS, message)

    async def expect_error(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.ERROR, message)

    async def expect_info(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.INFO, message)

    async def expect_warning(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.WARNING, message)

    async def close(self) -> None:
        await self.ui.click("notificationClose")

    async def expect_closed(self, timeout: Timeout = None) -> None:
        await self.ui.expect_hidden("notification", timeout)
