"""Application header: navigation links and user menu."""

from __future__ import annotations

from typing import Literal

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout

Section = Literal["contests", "predictions", "teams", "sports", "analytics"]

HEADER = PageDefinition(
    name="Header",
    path=None,
    locators={
        "header": "header",
        "logo": "header .logo, header a:first-child",
        "contestsLink": 'a[href="/contests"]',
        "predictionsLink": 'a[href="/predictions"]',
        "teamsLink": 'a[href="/teams"]',
        "sportsLink": 'a[href="/sports"]',
        "analyticsLink": 'a[href="/analytics"]',
        "profileLink": 'a[href="/profile"]',
        "userMenu": ".ant-dropdown-trigger, .ant-avatar",
        "logoutButton": "text=Logout",
        "welcome": "text=Welcome, {name}",
        "activeMenuItem": '.ant-menu-item-selected:has-text("{item}")',
    },
)


class HeaderComponent:
    """Header shown on every authenticated screen."""

    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> HeaderComponent:
        return cls(PageObject.from_settings(driver, HEADER, settings))

    async def navigate_to(self, section: Section) -> None:
        await self.ui.click(f"{section}Link")
        await self.ui.expect_url(f"/{section}")

    async def open_user_menu(self) -> None:
        await self.ui.click("userMenu")

    async def go_to_profile(self) -> None:
        await self.open_user_menu()
        await self.ui.click("profileLink")

    async def logout(self) -> None:
        await self.open_user_menu()
        await self.ui.click("logoutButton")

    async def expect_logged_in(self, user_name: str | None = None) -> None:
        await self.ui.expect_visible("userMenu")
        if user_name:
            await self.ui.expect_visible("welcome", name=user_name)

    async def expect_logged_out(self, timeout: Timeout = None) -> None:
        await self.ui.expect_url("/login", timeout)

    async def expect_navigation_visible(self) -> None:
        await self.ui.expect_visible("contestsLink")
        await self.ui.expect_visible("predictionsLink")

    async def expect_active_menu_item(self, item: str) -> None:
        await self.ui.expect_visible("activeMenuItem", item=item)
