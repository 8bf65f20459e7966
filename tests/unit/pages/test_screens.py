"""Unit tests for the screen and component page objects."""

import pytest

from contests_e2e.core.exceptions import ExpectationTimeoutError
from contests_e2e.driver.protocol import DownloadInfo
from contests_e2e.pages import (
    ANALYTICS,
    CONTESTS,
    LOGIN,
    REGISTER,
    AnalyticsPage,
    ContestsPage,
    HeaderComponent,
    LoginPage,
    ModalComponent,
    NotificationComponent,
    PageDefinition,
    PageObject,
    RegisterPage,
)
from contests_e2e.pages.components import HEADER, MODAL, NOTIFICATIONS
from contests_e2e.sync.retry import RetryableAction
from contests_e2e.sync.wait import WaitEngine
from tests.support.fakes import FakeDriver

BASE_URL = "http://localhost:3000"


@pytest.fixture
def ui(fake_driver: FakeDriver, waits: WaitEngine, retry: RetryableAction):
    def factory(definition: PageDefinition) -> PageObject:
        return PageObject(fake_driver, definition, base_url=BASE_URL, waits=waits, retry=retry)

    return factory


def add_all(driver: FakeDriver, definition: PageDefinition, *names: str, **params) -> None:
    for name in names:
        driver.add(definition.locators[name].format(**params))


@pytest.mark.unit
class TestLoginPage:
    """Tests for the login screen."""

    async def test_login_fills_and_submits(self, ui, fake_driver: FakeDriver) -> None:
        """
        Given: The login form
        When: login() is called
        Then: Email and password are filled, then the button clicked
        """
        add_all(fake_driver, LOGIN, "emailInput", "passwordInput", "loginButton")
        page = LoginPage(ui(LOGIN))

        await page.open()
        await page.login("testuser@example.com", "TestUser123!")

        assert fake_driver.call_names() == ["navigate", "fill", "fill", "click"]
        assert fake_driver.filled['input[type="email"]'] == "testuser@example.com"
        assert fake_driver.calls[0] == ("navigate", f"{BASE_URL}/login")

    async def test_expect_error(self, ui, fake_driver: FakeDriver) -> None:
        fake_driver.add_notification("error", "Login failed", "Invalid email or password")
        page = LoginPage(ui(LOGIN))

        seen = await page.expect_error("Invalid email")

        assert seen.message == "Login failed"


@pytest.mark.unit
class TestRegisterPage:
    """Tests for the registration screen."""

    async def test_confirmation_defaults_to_password(self, ui, fake_driver: FakeDriver) -> None:
        add_all(
            fake_driver,
            REGISTER,
            "nameInput",
            "emailInput",
            "passwordInput",
            "confirmPasswordInput",
            "registerButton",
        )
        page = RegisterPage(ui(REGISTER))

        await page.register("Jane Doe", "jane@example.com", "Secret123!")

        assert fake_driver.filled[REGISTER.locators["confirmPasswordInput"]] == "Secret123!"
        assert fake_driver.call_names()[-1] == "click"


@pytest.mark.unit
class TestContestsPage:
    """Tests for the contests screen."""

    async def test_create_contest(self, ui, fake_driver: FakeDriver) -> None:
        """
        Given: A create button that opens a modal, and an OK button closing it
        When: create_contest() is called
        Then: The form is filled and the modal is closed afterwards
        """
        add_all(
            fake_driver,
            CONTESTS,
            "createContestButton",
            "contestTitleInput",
            "contestDescriptionInput",
        )
        modal = fake_driver.add(".ant-modal", visible=False)
        fake_driver.add(".ant-modal-footer button.ant-btn-primary")
        fake_driver.on_click(
            CONTESTS.locators["createContestButton"], lambda: setattr(modal, "visible", True)
        )
        fake_driver.on_click(
            ".ant-modal-footer button.ant-btn-primary", lambda: setattr(modal, "visible", False)
        )
        page = ContestsPage(ui(CONTESTS))

        await page.create_contest("Cup Final", "Predict the final")

        assert fake_driver.filled[CONTESTS.locators["contestTitleInput"]] == "Cup Final"
        assert not modal.visible

    async def test_join_uses_indexed_card(self, ui, fake_driver: FakeDriver) -> None:
        selector = CONTESTS.locators["joinButton"].format(index=1)
        fake_driver.add(selector)
        page = ContestsPage(ui(CONTESTS))

        await page.join_contest(1)

        assert fake_driver.calls == [("click", selector)]

    async def test_expect_count_at_least(self, ui, fake_driver: FakeDriver) -> None:
        for appear_at in (0.0, 0.4, 0.8):
            fake_driver.add(".ant-card", appear_at=appear_at)
        page = ContestsPage(ui(CONTESTS))

        assert await page.expect_count_at_least(3) == 3
        with pytest.raises(ExpectationTimeoutError, match="at least 5 contest card"):
            await page.expect_count_at_least(5, 400)

    async def test_search_tolerates_slow_spinner(self, ui, fake_driver: FakeDriver) -> None:
        """Search never fails just because the spinner lingers."""
        add_all(fake_driver, CONTESTS, "searchInput", "searchButton")
        fake_driver.add(".ant-spin")
        page = ContestsPage(ui(CONTESTS))

        await page.search("Cup")

        assert fake_driver.call_names() == ["fill", "click"]


@pytest.mark.unit
class TestAnalyticsPage:
    """Tests for the analytics screen."""

    async def test_export_returns_download(self, ui, fake_driver: FakeDriver) -> None:
        add_all(fake_driver, ANALYTICS, "exportButton")
        fake_driver.download = DownloadInfo(suggested_filename="analytics.csv", path="/tmp/a.csv")
        page = AnalyticsPage(ui(ANALYTICS))

        info = await page.export_data()

        assert info.suggested_filename == "analytics.csv"
        assert "wait_for_download" in fake_driver.call_names()
        assert ("click", ANALYTICS.locators["exportButton"]) in fake_driver.calls

    async def test_export_other_format_picks_menu_item(self, ui, fake_driver: FakeDriver) -> None:
        add_all(fake_driver, ANALYTICS, "exportButton")
        add_all(fake_driver, ANALYTICS, "exportFormat", format="JSON")
        page = AnalyticsPage(ui(ANALYTICS))

        await page.export_data("JSON")

        assert ("click", '.ant-dropdown-menu-item:has-text("JSON")') in fake_driver.calls


@pytest.mark.unit
class TestComponents:
    """Tests for header, modal and notification components."""

    async def test_header_navigation(self, ui, fake_driver: FakeDriver) -> None:
        fake_driver.add('a[href="/analytics"]')
        fake_driver.on_click(
            'a[href="/analytics"]', lambda: setattr(fake_driver, "url", f"{BASE_URL}/analytics")
        )
        header = HeaderComponent(ui(HEADER))

        await header.navigate_to("analytics")

        assert fake_driver.url.endswith("/analytics")

    async def test_logout_opens_menu_first(self, ui, fake_driver: FakeDriver) -> None:
        add_all(fake_driver, HEADER, "userMenu", "logoutButton")
        header = HeaderComponent(ui(HEADER))

        await header.logout()

        assert [selector for _, selector in fake_driver.calls] == [
            HEADER.locators["userMenu"],
            HEADER.locators["logoutButton"],
        ]

    async def test_modal_cancel_waits_for_close(self, ui, fake_driver: FakeDriver) -> None:
        modal = fake_driver.add(".ant-modal")
        cancel = ".ant-modal-footer button:not(.ant-btn-primary)"
        fake_driver.add(cancel)
        fake_driver.on_click(cancel, lambda: setattr(modal, "visible", False))
        component = ModalComponent(ui(MODAL))

        await component.wait_for_open()
        await component.cancel()

        assert not modal.visible

    async def test_notification_component(self, ui, fake_driver: FakeDriver) -> None:
        fake_driver.add_notification("info", "Heads up", "Contest starts soon")
        component = NotificationComponent(ui(NOTIFICATIONS))

        seen = await component.expect_info("starts soon")

        assert seen.description == "Contest starts soon"
