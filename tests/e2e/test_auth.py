"""Authentication flows: login, logout, registration."""

import pytest

from contests_e2e.pages import HeaderComponent, LoginPage, RegisterPage
from contests_e2e.sync.wait import TimeoutTier


@pytest.mark.e2e
class TestLogin:
    """Login screen flows."""

    async def test_login_form_visible(self, fixtures) -> None:
        login_page: LoginPage = await fixtures.get("login_page")

        await login_page.open()

        await login_page.expect_form_visible()

    async def test_valid_login_redirects_to_contests(self, fixtures) -> None:
        """
        Given: The standard test user
        When: Logging in through the form
        Then: The app lands on /contests with the user menu shown
        """
        values = await fixtures.resolve("login_page", "test_user", "header")
        login_page, user, header = values["login_page"], values["test_user"], values["header"]

        await login_page.open()
        await login_page.login(user.email, user.password)

        await login_page.ui.expect_url("/contests", TimeoutTier.MEDIUM)
        await header.expect_logged_in()

    async def test_invalid_password_shows_error(self, fixtures) -> None:
        values = await fixtures.resolve("login_page", "test_user")
        login_page: LoginPage = values["login_page"]

        await login_page.open()
        await login_page.login(values["test_user"].email, "wrong-password")

        await login_page.expect_error()
        await login_page.expect_on_page()

    async def test_register_link(self, fixtures) -> None:
        login_page: LoginPage = await fixtures.get("login_page")

        await login_page.open()
        await login_page.click_register_link()

        await login_page.ui.expect_url("/register")


@pytest.mark.e2e
class TestLogout:
    async def test_logout_returns_to_login(self, fixtures) -> None:
        values = await fixtures.resolve("authenticated_page", "header")
        header: HeaderComponent = values["header"]

        await header.logout()

        await header.expect_logged_out()


@pytest.mark.e2e
class TestRegistration:
    """Registration screen flows."""

    async def test_register_new_user(self, fixtures) -> None:
        """
        Given: A freshly generated user
        When: Registering through the form
        Then: A success notification appears
        """
        values = await fixtures.resolve("register_page", "new_user")
        register_page: RegisterPage = values["register_page"]
        user = values["new_user"]

        await register_page.open()
        await register_page.register(user["display_name"], user["email"], user["password"])

        await register_page.expect_registration_success()

    async def test_password_mismatch(self, fixtures) -> None:
        values = await fixtures.resolve("register_page", "new_user")
        register_page: RegisterPage = values["register_page"]
        user = values["new_user"]

        await register_page.open()
        await register_page.register(
            user["display_name"], user["email"], user["password"], "Different123!"
        )

        await register_page.expect_on_page()
