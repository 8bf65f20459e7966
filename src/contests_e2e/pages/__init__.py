"""Page objects for the contests web application.

Screens compose a ``PageObject`` (``screen.ui``) that owns synchronization;
their methods are the user flows of that screen.
"""

from contests_e2e.pages.analytics import ANALYTICS, AnalyticsPage
from contests_e2e.pages.base import (
    COMMON_LOCATORS,
    PAGE_TRANSITIONS,
    ElementQuery,
    NotificationKind,
    NotificationSnapshot,
    PageCapability,
    PageDefinition,
    PageObject,
    PageState,
)
from contests_e2e.pages.components import HeaderComponent, ModalComponent, NotificationComponent
from contests_e2e.pages.contests import CONTESTS, ContestsPage
from contests_e2e.pages.login import LOGIN, LoginPage
from contests_e2e.pages.register import REGISTER, RegisterPage

__all__ = [
    "ANALYTICS",
    "AnalyticsPage",
    "COMMON_LOCATORS",
    "CONTESTS",
    "ContestsPage",
    "ElementQuery",
    "HeaderComponent",
    "LOGIN",
    "LoginPage",
    "ModalComponent",
    "NotificationComponent",
    "NotificationKind",
    "NotificationSnapshot",
    "PAGE_TRANSITIONS",
    "PageCapability",
    "PageDefinition",
    "PageObject",
    "PageState",
    "REGISTER",
    "RegisterPage",
]
