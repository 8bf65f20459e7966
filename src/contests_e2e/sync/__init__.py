"""UI synchronization: polling waits and bounded action retry.

Usage:
    from contests_e2e.sync import RetryableAction, TimeoutTier, WaitEngine, visible

    waits = WaitEngine(driver)
    await waits.wait_for(visible("#save"), TimeoutTier.SHORT)
"""

from contests_e2e.sync.conditions import (
    AllOf,
    Observation,
    WaitCondition,
    all_of,
    hidden,
    network_idle,
    predicate,
    snapshot,
    text_contains,
    url_equals,
    url_matches,
    visible,
)
from contests_e2e.sync.retry import ActionOutcome, AttemptRecord, RetryableAction, RetryPolicy
from contests_e2e.sync.wait import TimeoutTier, TimeoutTiers, WaitEngine, WaitResult

__all__ = [
    "ActionOutcome",
    "AllOf",
    "AttemptRecord",
    "Observation",
    "RetryPolicy",
    "RetryableAction",
    "TimeoutTier",
    "TimeoutTiers",
    "WaitCondition",
    "WaitEngine",
    "WaitResult",
    "all_of",
    "hidden",
    "network_idle",
    "predicate",
    "snapshot",
    "text_contains",
    "url_equals",
    "url_matches",
    "visible",
]
