"""Core types shared by every layer of the suite."""

from contests_e2e.core.exceptions import (
    ActionError,
    AttemptTimeoutError,
    ConfigurationError,
    CyclicDependencyError,
    DriverError,
    DuplicateFixtureError,
    E2EError,
    ElementNotFoundError,
    ElementNotInteractableError,
    ExpectationFailedError,
    ExpectationTimeoutError,
    FixtureError,
    FixtureSetupError,
    PageStateError,
    StaleElementError,
    TeardownError,
    TransientDriverError,
    UnknownFixtureError,
    UnknownLocatorError,
    VisualMismatchError,
    WaitTimeoutError,
)

__all__ = [
    "ActionError",
    "AttemptTimeoutError",
    "ConfigurationError",
    "CyclicDependencyError",
    "DriverError",
    "DuplicateFixtureError",
    "E2EError",
    "ElementNotFoundError",
    "ElementNotInteractableError",
    "ExpectationFailedError",
    "ExpectationTimeoutError",
    "FixtureError",
    "FixtureSetupError",
    "PageStateError",
    "StaleElementError",
    "TeardownError",
    "TransientDriverError",
    "UnknownFixtureError",
    "UnknownLocatorError",
    "VisualMismatchError",
    "WaitTimeoutError",
]
