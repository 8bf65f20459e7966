"""Contests list screen."""

from __future__ import annotations

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import ExpectationTimeoutError, WaitTimeoutError
from contests_e2e.driver.protocol import Driver
from contests_e2e.pages.base import PageDefinition, PageObject
from contests_e2e.sync.wait import Timeout, TimeoutTier

log = structlog.get_logger(__name__)

CARD = ".ant-card >> nth={index}"

CONTESTS = PageDefinition(
    name="Contests Page",
    path="/contests",
    locators={
        "createContestButton": 'button:has-text("Create Contest")',
        "contestCards": ".ant-card",
        "contestCard": CARD,
        "joinButton": CARD + ' >> button:has-text("Join")',
        "leaveButton": CARD + ' >> button:has-text("Leave")',
        "searchInput": 'input[placeholder*="search" i]',
        "searchButton": ".ant-input-search-button",
        "filterDropdown": ".ant-select >> nth=0",
        "filterOption": '.ant-select-dropdown .ant-select-item:has-text("{status}")',
        "contestTitleInput": 'input[placeholder*="title" i]',
        "contestDescriptionInput": ".ant-modal textarea",
        "pagination": ".ant-pagination",
        "nextPage": ".ant-pagination .ant-pagination-next",
        "previousPage": ".ant-pagination .ant-pagination-prev",
    },
)


class ContestsPage:
    """Contest cards with create, join, leave, search, filter and paging."""

    def __init__(self, ui: PageObject) -> None:
        self.ui = ui

    @classmethod
    def create(cls, driver: Driver, settings: Settings) -> ContestsPage:
        return cls(PageObject.from_settings(driver, CONTESTS, settings))

    async def open(self) -> None:
        await self.ui.navigate()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def open_create_modal(self) -> None:
        await self.ui.click("createContestButton")
        await self.ui.expect_visible("modal", TimeoutTier.SHORT)

    async def create_contest(self, title: str, description: str) -> None:
        await self.open_create_modal()
        await self.ui.fill("contestTitleInput", title)
        await self.ui.fill("contestDescriptionInput", description)
        await self.ui.click("modalOk")
        await self.ui.expect_hidden("modal")
        log.info("contest_created", title=title)

    async def join_contest(self, index: int) -> None:
        await self.ui.click("joinButton", index=index)

    async def leave_contest(self, index: int) -> None:
        await self.ui.click("leaveButton", index=index)

    async def open_contest_details(self, index: int) -> None:
        await self.ui.click("contestCard", index=index)

    async def search(self, query: str) -> None:
        await self.ui.fill("searchInput", query)
        await self.ui.click("searchButton")
        await self.ui.wait_for_loading_complete()

    async def filter_by_status(self, status: str) -> None:
        await self.ui.click("filterDropdown")
        await self.ui.click("filterOption", status=status)
        await self.ui.wait_for_loading_complete()

    async def next_page(self) -> None:
        await self.ui.click("nextPage")
        await self.ui.wait_for_loading_complete()

    async def previous_page(self) -> None:
        await self.ui.click("previousPage")
        await self.ui.wait_for_loading_complete()

    async def card_count(self) -> int:
        return await self.ui.count("contestCards")

    # -------------------------------------------------------------------------
    # Assertions
    # -------------------------------------------------------------------------

    async def expect_list_visible(self) -> None:
        await self.ui.expect_visible("contestCard", TimeoutTier.LONG, index=0)

    async def expect_count_at_least(self, minimum: int, timeout: Timeout = None) -> int:
        """Wait until at least ``minimum`` cards are rendered; returns the count."""
        try:
            return await self.ui.waits.wait_for_value(
                self.card_count,
                lambda count: count >= minimum,
                timeout,
                description=f"at least {minimum} contest card(s)",
            )
        except WaitTimeoutError as e:
            raise ExpectationTimeoutError(
                f"Contests Page should show at least {minimum} contest card(s)", e
            ) from e

    async def expect_join_visible(self, index: int) -> None:
        await self.ui.expect_visible("joinButton", index=index)

    async def expect_leave_visible(self, index: int) -> None:
        await self.ui.expect_visible("leaveButton", index=index)

    async def expect_on_page(self, timeout: Timeout = None) -> None:
        await self.ui.expect_url("/contests", timeout)
