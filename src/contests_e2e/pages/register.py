"""Registration screen."""

from __future__ import annotations

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import NotificationKind, NotificationSnapshot, PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout

REGISTER = PageDefinition(
    name="Register Page",
    path="/register",
    locators={
        "nameInput": 'input[placeholder*="name" i] >> nth=0',
        "emailInput": 'input[type="email"]',
        "passwordInput": 'input[type="password"] >> nth=0',
        "confirmPasswordInput": 'input[type="password"] >> nth=1',
        "registerButton": 'button:has-text("Register")',
        "loginLink": 'a:has-text("Login")',
    },
)


class RegisterPage:
    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> RegisterPage:
        return cls(PageObject.from_settings(driver, REGISTER, settings))

    async def open(self) -> None:
        await self.ui.navigate()

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str | None = None,
    ) -> None:
        """Fill and submit the form; the confirmation defaults to ``password``."""
        await self.ui.fill("nameInput", name)
        await self.ui.fill("emailInput", email)
        await self.ui.fill("passwordInput", password)
        await self.ui.fill("confirmPasswordInput", confirm_password or password)
        await self.ui.click("registerButton")

    async def click_login_link(self) -> None:
        await self.ui.click("loginLink")

    async def expect_form_visible(self) -> None:
        await self.ui.expect_visible("emailInput")
        await self.ui.expect_visible("passwordInput")
        await self.ui.expect_visible("registerButton")

    async def expect_registration_success(self) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.SUCCESS)

    async def expect_error(self, message: str | None = None) -> NotificationSnapshot:
        return await self.ui.expect_notification(NotificationKind.ERROR, message)

    async def expect_on_page(self, timeout: Timeout = None) -> None:
        await self.ui.expect_url("/register", timeout)
