"""Browser test configuration for the contests web app.

Every test in this directory drives a real browser against the running
application through the suite fixture graph (see ``tests/support/fixtures``).

Usage:
    @pytest.mark.e2e
    async def test_contests_list(fixtures):
        contests = await fixtures.get("contests_page")
        await contests.expect_list_visible()
"""

import pytest

# =============================================================================
# Collection
# =============================================================================


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark every browser test as e2e and slow."""
    for item in items:
        if "/e2e/" in item.nodeid or item.nodeid.startswith("e2e/"):
            item.add_marker(pytest.mark.e2e)
            item.add_marker(pytest.mark.slow)
