"""Fixture graph, suite fixtures and test data factories."""

from contests_e2e.fixtures.data import (
    ChallengeFactory,
    ContestFactory,
    PredictionFactory,
    TeamFactory,
    UserFactory,
    api_payload,
    unique_suffix,
)
from contests_e2e.fixtures.graph import FixtureDefinition, FixtureGraph, FixtureScope, TestContext
from contests_e2e.fixtures.suite import (
    Credentials,
    build_suite_graph,
    capture_failure_artifacts,
    login,
    mock_responses,
)

__all__ = [
    "ChallengeFactory",
    "ContestFactory",
    "Credentials",
    "FixtureDefinition",
    "FixtureGraph",
    "FixtureScope",
    "PredictionFactory",
    "TeamFactory",
    "TestContext",
    "UserFactory",
    "api_payload",
    "build_suite_graph",
    "capture_failure_artifacts",
    "login",
    "mock_responses",
    "unique_suffix",
]
