"""Unit tests for the wait engine."""

import asyncio
import time

import pytest

from contests_e2e.config.settings import Settings
from contests_e2e.core.exceptions import StaleElementError, WaitTimeoutError
from contests_e2e.sync.conditions import Observation, all_of, hidden, predicate, visible
from contests_e2e.sync.wait import TimeoutTier, TimeoutTiers, WaitEngine
from tests.support.fakes import FakeClock, FakeDriver


@pytest.mark.unit
class TestTimeoutTiers:
    """Tests for timeout tier resolution."""

    def test_resolve(self) -> None:
        """Tiers, explicit values and None (MEDIUM) resolve to milliseconds."""
        tiers = TimeoutTiers()

        assert tiers.resolve(TimeoutTier.SHORT) == 5000
        assert tiers.resolve(TimeoutTier.MEDIUM) == 10000
        assert tiers.resolve(TimeoutTier.LONG) == 30000
        assert tiers.resolve(None) == 10000
        assert tiers.resolve(1234) == 1234

    def test_rejects_non_positive(self) -> None:
        """Every wait is bounded by a positive timeout."""
        with pytest.raises(ValueError):
            TimeoutTiers().resolve(0)

    def test_from_settings(self) -> None:
        """Tier values come from settings."""
        settings = Settings(
            _env_file=None, timeout_short_ms=1000, timeout_medium_ms=2000, timeout_long_ms=3000
        )

        assert TimeoutTiers.from_settings(settings) == TimeoutTiers(1000, 2000, 3000)


@pytest.mark.unit
class TestWaitFor:
    """Tests for WaitEngine.wait_for."""

    async def test_element_at_six_seconds(
        self, fake_driver: FakeDriver, waits: WaitEngine
    ) -> None:
        """
        Given: An element that becomes visible at t=6s
        When: Waited for on SHORT (5s), then on MEDIUM (10s)
        Then: SHORT times out, MEDIUM succeeds
        """
        fake_driver.add("#save", appear_at=6.0)

        with pytest.raises(WaitTimeoutError) as exc_info:
            await waits.wait_for(visible("#save"), TimeoutTier.SHORT)
        assert exc_info.value.timeout_ms == 5000

        result = await waits.wait_for(visible("#save"), TimeoutTier.MEDIUM)
        assert result.satisfied

    async def test_succeeds_when_timeout_exceeds_appearance(
        self, fake_driver: FakeDriver, waits: WaitEngine
    ) -> None:
        """Condition true at t=1.5s is seen by a 2s wait."""
        fake_driver.add("#save", appear_at=1.5)

        result = await waits.wait_for(visible("#save"), 2000)

        assert result.satisfied
        assert 1500 <= result.elapsed_ms <= 1700
        assert result.polls >= 2

    async def test_timeout_is_bounded_by_one_poll(
        self, fake_driver: FakeDriver, waits: WaitEngine, clock: FakeClock
    ) -> None:
        """
        Given: A condition that never holds
        When: Waited for 1000ms with a 200ms poll
        Then: It raises within timeout + one poll interval
        """
        with pytest.raises(WaitTimeoutError) as exc_info:
            await waits.wait_for(visible("#never"), 1000)

        error = exc_info.value
        assert 1000 <= error.elapsed_ms <= 1200
        assert clock.now <= 1.2
        assert error.last_state == "element absent"
        assert error.polls >= 5

    async def test_sleeps_never_overshoot_budget(
        self, waits: WaitEngine, clock: FakeClock
    ) -> None:
        """The final sleep is clipped to the remaining budget."""
        with pytest.raises(WaitTimeoutError):
            await waits.wait_for(visible("#never"), 300)

        assert clock.sleeps[0] == 0.2
        assert all(s <= 0.2 for s in clock.sleeps)
        assert sum(clock.sleeps) == pytest.approx(0.3)

    async def test_satisfied_on_first_check_does_not_sleep(
        self, fake_driver: FakeDriver, waits: WaitEngine, clock: FakeClock
    ) -> None:
        """No sleep happens when the condition already holds."""
        fake_driver.add("#save")

        result = await waits.wait_for(visible("#save"))

        assert result.polls == 1
        assert clock.sleeps == []

    async def test_best_effort_returns_instead_of_raising(
        self, fake_driver: FakeDriver, waits: WaitEngine
    ) -> None:
        """Best-effort waits report an unsatisfied result on timeout."""
        fake_driver.add(".ant-spin")

        result = await waits.wait_for(hidden(".ant-spin"), 500, best_effort=True)

        assert not result.satisfied
        assert result.observation.state == "still visible"

    async def test_transient_driver_error_counts_as_unsatisfied(
        self, fake_driver: FakeDriver, waits: WaitEngine, clock: FakeClock
    ) -> None:
        """A detached element during a check is polled again."""
        calls = 0

        async def flaky(_driver) -> bool:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise StaleElementError("detached")
            return True

        result = await waits.wait_for(predicate(flaky, "flaky"), 1000)

        assert result.satisfied
        assert result.polls == 2

    async def test_non_transient_error_propagates(self, waits: WaitEngine) -> None:
        """Unexpected check errors are not swallowed."""

        async def broken(_driver) -> bool:
            raise RuntimeError("bug in condition")

        with pytest.raises(RuntimeError, match="bug in condition"):
            await waits.wait_for(predicate(broken, "broken"), 1000)

    async def test_result_value_from_successful_tick(self, waits: WaitEngine) -> None:
        """Values captured by the condition are exposed on the result."""

        async def capture(_driver) -> Observation:
            return Observation(True, "ok", value={"message": "Saved"})

        result = await waits.wait_for(predicate(capture, "capture"))

        assert result.value == {"message": "Saved"}

    async def test_all_of_requires_every_part_in_one_tick(
        self, fake_driver: FakeDriver, waits: WaitEngine
    ) -> None:
        """
        Given: A visible during [0s, 1s) and B visible from 1.5s
        When: all_of(A, B) is waited for 3s
        Then: It times out; each part held, but never in the same tick
        """
        fake_driver.add("#a", disappear_at=1.0)
        fake_driver.add("#b", appear_at=1.5)

        with pytest.raises(WaitTimeoutError) as exc_info:
            await waits.wait_for(all_of(visible("#a"), visible("#b")), 3000)

        assert "'#a' is visible: element absent" in exc_info.value.last_state
        assert "'#b' is visible: ok" in exc_info.value.last_state

    async def test_hung_check_is_cut_off_by_budget(self, fake_driver: FakeDriver) -> None:
        """
        Given: A condition check that never returns
        When: Waited for 300ms on the real clock
        Then: The wait raises shortly after 300ms instead of hanging
        """

        async def hang(_driver) -> bool:
            await asyncio.sleep(10)
            return True

        waits = WaitEngine(fake_driver, poll_interval_ms=50)
        started = time.monotonic()

        with pytest.raises(WaitTimeoutError) as exc_info:
            await waits.wait_for(predicate(hang, "hung check"), 300)

        assert time.monotonic() - started < 1.0
        assert exc_info.value.last_state.startswith("check did not complete within")


@pytest.mark.unit
class TestWaitForValue:
    """Tests for WaitEngine.wait_for_value."""

    async def test_polls_until_accepted(
        self, fake_driver: FakeDriver, waits: WaitEngine, clock: FakeClock
    ) -> None:
        """
        Given: Cards rendering one at a time
        When: Waiting for at least 3
        Then: Returns the first accepted count
        """
        for index in range(5):
            fake_driver.add(".ant-card", appear_at=index * 0.5)

        count = await waits.wait_for_value(
            action=lambda: fake_driver.count(".ant-card"),
            accept=lambda n: n >= 3,
            description="at least 3 cards",
        )

        assert count >= 3

    async def test_raises_with_last_result(self, waits: WaitEngine) -> None:
        """Timeout reports the last value seen."""

        async def status() -> str:
            return "pending"

        with pytest.raises(WaitTimeoutError, match="'pending'"):
            await waits.wait_for_value(status, lambda s: s == "ready", 500)


@pytest.mark.unit
class TestWaitEngineConfig:
    """Tests for WaitEngine construction."""

    def test_rejects_non_positive_poll(self, fake_driver: FakeDriver) -> None:
        with pytest.raises(ValueError):
            WaitEngine(fake_driver, poll_interval_ms=0)

    def test_from_settings(self, fake_driver: FakeDriver) -> None:
        """Poll interval and tiers come from settings."""
        settings = Settings(_env_file=None, poll_interval_ms=50, timeout_short_ms=1000)

        engine = WaitEngine.from_settings(fake_driver, settings)

        assert engine.poll_interval_ms == 50
        assert engine.tiers.short_ms == 1000
