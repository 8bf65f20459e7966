"""In-memory stand-ins for the browser driver and the clock."""

from tests.support.fakes.clock import FakeClock
from tests.support.fakes.driver import FakeDriver, FakeElement

__all__ = ["FakeClock", "FakeDriver", "FakeElement"]
