"""Ant Design modal dialog."""

from __future__ import annotations

from contests_e2e.config.settings import Settings
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout, TimeoutTier

MODAL = PageDefinition(
    name="Modal",
    path=None,
    locators={
        "body": ".ant-modal-body",
        "footer": ".ant-modal-footer",
        "input": '.ant-modal-body input[placeholder*="{placeholder}" i]',
        "textarea": ".ant-modal-body textarea",
    },
)


class ModalComponent:
    """The currently open modal. Only one is expected at a time."""

    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> ModalComponent:
        return cls(PageObject.from_settings(driver, MODAL, settings))

    async def wait_for_open(self, timeout: Timeout = TimeoutTier.SHORT) -> None:
        await self.ui.expect_visible("modal", timeout)

    async def expect_closed(self, timeout: Timeout = None) -> None:
        await self.ui.expect_hidden("modal", timeout)

    async def title(self) -> str:
        return await self.ui.read_text("modalTitle")

    async def expect_title(self, title: str) -> None:
        await self.ui.expect_text("modalTitle", title)

    async def expect_content_contains(self, text: str) -> None:
        await self.ui.expect_text("body", text)

    async def fill_input(self, placeholder: str, value: str) -> None:
        await self.ui.fill("input", value, placeholder=placeholder)

    async def fill_textarea(self, value: str) -> None:
        await self.ui.fill("textarea", value)

    async def ok(self) -> None:
        """Confirm and wait for the modal to close."""
        await self.ui.click("modalOk")
        await self.expect_closed()

    async def cancel(self) -> None:
        await self.ui.click("modalCancel")
        await self.expect_closed()

    async def close(self) -> None:
        await self.ui.click("modalClose")
        await self.expect_closed()
