"""
Suite fixtures

The fixture graph every e2e test draws from:

    settings
    browser_session ── driver ─┬─ authenticated_page ── contests_page
                               ├─ admin_page
                               ├─ login_page / register_page / analytics_page
                               ├─ header / notifications / modal
                               └─ mocked_api
    test_user / test_admin / new_user

Each test gets its own browser session; nothing here is shared between tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import ExpectationTimeoutError, WaitTimeoutError
from contests_e2e.driver.protocol import Driver
from contests_e2e.driver.session import BrowserSession
from contests_e2e.fixtures.data import (
    ChallengeFactory,
    ContestFactory,
    PredictionFactory,
    TeamFactory,
    UserFactory,
    api_payload,
)
from contests_e2e.fixtures.graph import FixtureGraph, TestContext
from contests_e2e.pages.analytics import AnalyticsPage
from contests_e2e.pages.components import HeaderComponent, ModalComponent, NotificationComponent
from contests_e2e.pages.contests import ContestsPage
from contests_e2e.pages.login import LoginPage
from contests_e2e.pages.register import RegisterPage
from contests_e2e.sync.wait import TimeoutTier

log = structlog.get_logger(__name__)

LANDING_PATH = "/contests"


@dataclass(frozen=True)
class Credentials:
    """A principal the suite can log in as."""

    email: str
    password: str
    name: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, name={self.name!r})"


async def login(driver: Driver, settings: Settings, credentials: Credentials) -> Driver:
    """Log in through the login screen and wait for the landing redirect.

    Raises:
        ExpectationTimeoutError: If the redirect never happened; the message
            names the principal.
    """
    page = LoginPage.create(driver, settings)
    await page.open()
    await page.login(credentials.email, credentials.password)
    try:
        await page.ui.expect_url(LANDING_PATH, TimeoutTier.MEDIUM)
    except WaitTimeoutError as e:
        raise ExpectationTimeoutError(
            f"Login as {credentials.email} should redirect to {LANDING_PATH}", e
        ) from e
    log.info("logged_in", email=credentials.email)
    return driver


async def logout(driver: Driver) -> None:
    await driver.clear_storage()


async def capture_failure_artifacts(context: TestContext, error: BaseException) -> None:
    """Save the screenshot and trace of a failed test, if it opened a browser."""
    if "browser_session" not in context:
        return
    session: BrowserSession = context.get("browser_session")
    log.info("capturing_failure_artifacts", error_type=type(error).__name__)
    await session.save_failure_artifacts(context.test_id)


def mock_responses() -> dict[str, Any]:
    """Canned API payloads keyed by route pattern."""
    user = {"id": 1, "email": "test@example.com", "username": "testuser", "displayName": "Test User"}
    contest = {**api_payload(ContestFactory.build()), "id": 1, "participantCount": 10}
    prediction = {
        **api_payload(PredictionFactory.build()),
        "id": 1,
        "contestId": 1,
        "points": 10,
        "status": "pending",
    }
    team = {**api_payload(TeamFactory.build()), "id": 1, "ownerId": 1, "memberCount": 1}
    challenge = {
        **api_payload(ChallengeFactory.build()),
        "id": 1,
        "challengerId": 1,
        "status": "pending",
    }
    return {
        "**/v1/auth/login": {"token": "mock-jwt-token", "user": user},
        "**/v1/contests": {"contests": [contest]},
        "**/v1/predictions": {"predictions": [prediction]},
        "**/v1/users/me": user,
        "**/v1/teams": {"teams": [team]},
        "**/v1/challenges": {"challenges": [challenge]},
    }


def build_suite_graph(settings: Settings) -> FixtureGraph:
    """Assemble the fixture graph used by the e2e and visual tests."""
    graph = FixtureGraph()

    graph.define("settings", lambda deps: settings)

    # -------------------------------------------------------------------------
    # Browser
    # -------------------------------------------------------------------------

    async def browser_session(deps: Mapping[str, Any]) -> BrowserSession:
        return await BrowserSession.start(deps["settings"])

    async def close_session(session: BrowserSession) -> None:
        await session.close()

    graph.define("browser_session", browser_session, ["settings"], teardown=close_session)
    graph.define("driver", lambda deps: deps["browser_session"].driver, ["browser_session"])

    # -------------------------------------------------------------------------
    # Principals
    # -------------------------------------------------------------------------

    graph.define(
        "test_user",
        lambda deps: Credentials(
            email=deps["settings"].test_user_email,
            password=deps["settings"].test_user_password.get_secret_value(),
            name=deps["settings"].test_user_name,
        ),
        ["settings"],
    )
    graph.define(
        "test_admin",
        lambda deps: Credentials(
            email=deps["settings"].test_admin_email,
            password=deps["settings"].test_admin_password.get_secret_value(),
            name=deps["settings"].test_admin_name,
        ),
        ["settings"],
    )
    graph.define("new_user", lambda deps: UserFactory.build())

    graph.define(
        "authenticated_page",
        lambda deps: login(deps["driver"], deps["settings"], deps["test_user"]),
        ["driver", "settings", "test_user"],
        teardown=logout,
    )
    graph.define(
        "admin_page",
        lambda deps: login(deps["driver"], deps["settings"], deps["test_admin"]),
        ["driver", "settings", "test_admin"],
        teardown=logout,
    )

    # -------------------------------------------------------------------------
    # Screens and components
    # -------------------------------------------------------------------------

    graph.define(
        "login_page",
        lambda deps: LoginPage.create(deps["driver"], deps["settings"]),
        ["driver", "settings"],
    )
    graph.define(
        "register_page",
        lambda deps: RegisterPage.create(deps["driver"], deps["settings"]),
        ["driver", "settings"],
    )

    async def contests_page(deps: Mapping[str, Any]) -> ContestsPage:
        page = ContestsPage.create(deps["authenticated_page"], deps["settings"])
        await page.open()
        return page

    graph.define("contests_page", contests_page, ["authenticated_page", "settings"])
    graph.define(
        "analytics_page",
        lambda deps: AnalyticsPage.create(deps["authenticated_page"], deps["settings"]),
        ["authenticated_page", "settings"],
    )
    graph.define(
        "header",
        lambda deps: HeaderComponent.create(deps["driver"], deps["settings"]),
        ["driver", "settings"],
    )
    graph.define(
        "notifications",
        lambda deps: NotificationComponent.create(deps["driver"], deps["settings"]),
        ["driver", "settings"],
    )
    graph.define(
        "modal",
        lambda deps: ModalComponent.create(deps["driver"], deps["settings"]),
        ["driver", "settings"],
    )

    # -------------------------------------------------------------------------
    # Mocked backend
    # -------------------------------------------------------------------------

    async def mocked_api(deps: Mapping[str, Any]) -> dict[str, Any]:
        responses = mock_responses()
        for pattern, payload in responses.items():
            await deps["driver"].route_json(pattern, payload)
        log.info("api_mocked", routes=list(responses))
        return responses

    graph.define("mocked_api", mocked_api, ["driver"])

    return graph
