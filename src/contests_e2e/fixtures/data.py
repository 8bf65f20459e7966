"""
Test Data Factories

Generates realistic form and API data for the contests application using
factory_boy and Faker. Values that must be unique across a run (emails,
titles, team names) carry a suffix from ``unique_suffix()``.

Usage:
    user = UserFactory.build()
    contest = ContestFactory.build(sport_type="Tennis")
    payload = api_payload(contest)  # camelCase keys for mocked responses
"""

from __future__ import annotations

import itertools
import json
import time
from datetime import UTC, datetime, timedelta
from typing import Any

import factory
from faker import Faker

fake = Faker()

# Seeded from the wall clock so suffixes do not repeat across runs
_suffixes = itertools.count(int(time.time() * 1000))


def unique_suffix() -> int:
    """Next value of a process-wide, strictly increasing counter."""
    return next(_suffixes)


def _in(hours: float) -> str:
    return (datetime.now(UTC) + timedelta(hours=hours)).isoformat()


class UserFactory(factory.Factory):
    """
    Factory for registration data.

    Usage:
        user = UserFactory.build()
        await register_page.register(user["display_name"], user["email"], user["password"])
    """

    class Meta:
        model = dict

    class Params:
        suffix = factory.LazyFunction(unique_suffix)

    email = factory.LazyAttribute(lambda o: f"test-{o.suffix}@example.com")
    password = "TestPass123!"
    username = factory.LazyAttribute(lambda o: f"user_{o.suffix}")
    display_name = factory.LazyFunction(lambda: fake.name())


class ContestFactory(factory.Factory):
    """Factory for contest creation data. Starts tomorrow and runs for a week."""

    class Meta:
        model = dict

    title = factory.LazyFunction(lambda: f"Test Contest {unique_suffix()}")
    description = factory.LazyFunction(lambda: fake.sentence(nb_words=8))
    sport_type = factory.LazyFunction(
        lambda: fake.random_element(["Football", "Basketball", "Tennis", "Hockey"])
    )
    start_date = factory.LazyFunction(lambda: _in(24))
    end_date = factory.LazyFunction(lambda: _in(24 * 8))
    max_participants = 100
    rules = factory.LazyFunction(lambda: json.dumps({"scoring": "standard"}))


class TeamFactory(factory.Factory):
    class Meta:
        model = dict

    name = factory.LazyFunction(lambda: f"Test Team {unique_suffix()}")
    description = factory.LazyFunction(lambda: fake.sentence(nb_words=5))
    max_members = 10


class PredictionFactory(factory.Factory):
    class Meta:
        model = dict

    event_id = factory.Sequence(lambda n: n + 1)
    prediction = factory.LazyFunction(
        lambda: fake.random_element(["Team A wins", "Team B wins", "Draw"])
    )
    score = factory.LazyFunction(
        lambda: f"{fake.pyint(min_value=0, max_value=4)}-{fake.pyint(min_value=0, max_value=4)}"
    )
    confidence = factory.LazyFunction(lambda: fake.pyint(min_value=50, max_value=100))


class ChallengeFactory(factory.Factory):
    """Head-to-head challenge with a deadline two days out."""

    class Meta:
        model = dict

    opponent_id = 2
    event_id = 1
    wager = factory.LazyFunction(lambda: fake.pyint(min_value=10, max_value=500, step=10))
    deadline = factory.LazyFunction(lambda: _in(48))


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def api_payload(record: dict[str, Any]) -> dict[str, Any]:
    """Same record with the camelCase keys the API speaks."""
    return {_camel(key): value for key, value in record.items()}
