"""End-to-end UI test core for the Sports Prediction Contests web app.

Subpackages:
    config: Settings and logging.
    core: Exception hierarchy.
    driver: Browser driver contract and its Playwright implementation.
    sync: Polling waits and action retry.
    pages: Page objects and shared components.
    fixtures: Fixture graph, suite fixtures and data factories.
"""

__version__ = "0.1.0"
