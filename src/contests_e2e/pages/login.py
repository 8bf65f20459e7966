"""Login screen."""

from __future__ import annotations

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import NotificationKind, NotificationSnapshot, PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout

log = structlog.get_logger(__name__)

LOGIN = PageDefinition(
    name="Login Page",
    path="/login",
    locators={
        "emailInput": 'input[type="email"]',
        "passwordInput": 'input[type="password"]',
        "loginButton": 'button:has-text("Login")',
        "registerLink": 'a:has-text("Register")',
        "pageTitle": "h1",
    },
)


class LoginPage:
    """Email/password login form."""

    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> LoginPage:
        return cls(PageObject.from_settings(driver, LOGIN, settings))

    async def open(self) -> None:
        await self.ui.navigate()

    async def login(self, email: str, password: str) -> None:
        """Fill and submit the form. Does not wait for the redirect."""
        await self.ui.fill("emailInput", email)
        await self.ui.fill("passwordInput", password)
        await self.ui.click("loginButton")
        log.info("login_submitted", email=email)

    async def click_register_link(self) -> None:
        await self.ui.click("registerLink")

    async def expect_form_visible(self) -> None:
        await self.ui.expect_visible("emailInput")
        await self.ui.expect_visible("passwordInput")
        await self.ui.expect_visible("loginButton")

    async def expect_error(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.ERROR, message)

    async def expect_on_page(self, timeout: Timeout = None) -> None:
        await self.ui.expect_url("/login", timeout)

    async def expect_title(self, title: str) -> None:
        await self.ui.expect_text("pageTitle", title)
