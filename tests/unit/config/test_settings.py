"""Unit tests for suite settings."""

import pytest
from pydantic import ValidationError

from contests_e2e.config.settings import Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove suite variables so defaults apply."""
    for name in (
        "BASE_URL",
        "TEST_USER_EMAIL",
        "TEST_USER_PASSWORD",
        "TIMEOUT_SHORT_MS",
        "TIMEOUT_MEDIUM_MS",
        "TIMEOUT_LONG_MS",
        "POLL_INTERVAL_MS",
        "BROWSER_NAME",
        "ARTIFACTS_DIR",
        "SCREENSHOT_ON_FAILURE",
        "TRACE_ON_FAILURE",
        "SNAPSHOT_THRESHOLD",
        "SNAPSHOT_MAX_DIFF_RATIO",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
class TestSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        """
        Given: No suite environment variables
        When: Settings are loaded without env files
        Then: Defaults match the documented values
        """
        settings = Settings(_env_file=None)

        assert settings.base_url == "http://localhost:3000"
        assert settings.test_user_email == "testuser@example.com"
        assert settings.test_user_password.get_secret_value() == "TestUser123!"
        assert settings.test_admin_email == "admin@example.com"
        assert (settings.timeout_short_ms, settings.timeout_medium_ms, settings.timeout_long_ms) == (
            5000,
            10000,
            30000,
        )
        assert settings.poll_interval_ms == 200
        assert settings.retry_max_attempts == 3
        assert settings.browser_name == "chromium"
        assert settings.headless is True

    def test_password_is_not_printed(self, clean_env: pytest.MonkeyPatch) -> None:
        """Secrets are masked in repr."""
        settings = Settings(_env_file=None)

        assert "TestUser123!" not in repr(settings)


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Tests for environment overrides and validation."""

    def test_env_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults, case-insensitively."""
        clean_env.setenv("BASE_URL", "https://staging.example.com/")
        clean_env.setenv("timeout_short_ms", "2000")

        settings = Settings(_env_file=None)

        assert settings.base_url == "https://staging.example.com"
        assert settings.timeout_short_ms == 2000

    def test_rejects_non_http_base_url(self, clean_env: pytest.MonkeyPatch) -> None:
        """Base URL must be http(s)."""
        clean_env.setenv("BASE_URL", "ftp://example.com")

        with pytest.raises(ValidationError, match="http"):
            Settings(_env_file=None)

    def test_rejects_unordered_tiers(self, clean_env: pytest.MonkeyPatch) -> None:
        """Tiers must satisfy short <= medium <= long."""
        clean_env.setenv("TIMEOUT_SHORT_MS", "20000")

        with pytest.raises(ValidationError, match="short <= medium <= long"):
            Settings(_env_file=None)

    def test_rejects_zero_poll_interval(self, clean_env: pytest.MonkeyPatch) -> None:
        """Poll interval must be positive."""
        clean_env.setenv("POLL_INTERVAL_MS", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_failure_artifacts_and_tolerance(self, clean_env: pytest.MonkeyPatch) -> None:
        """
        Given: Artifacts and snapshot tolerance set in the environment
        When: Settings are loaded
        Then: Overrides apply, and defaults record both artifacts
        """
        assert Settings(_env_file=None).screenshot_on_failure
        assert Settings(_env_file=None).trace_on_failure
        clean_env.setenv("TRACE_ON_FAILURE", "false")
        clean_env.setenv("ARTIFACTS_DIR", "out/failures")
        clean_env.setenv("SNAPSHOT_MAX_DIFF_RATIO", "0.01")

        settings = Settings(_env_file=None)

        assert not settings.trace_on_failure
        assert settings.artifacts_dir == "out/failures"
        assert settings.snapshot_max_diff_ratio == 0.01
        assert settings.snapshot_threshold == 0.2

    def test_rejects_ratio_over_one(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SNAPSHOT_THRESHOLD", "1.5")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_rejects_unknown_browser(self, clean_env: pytest.MonkeyPatch) -> None:
        """Only Playwright's browser types are accepted."""
        clean_env.setenv("BROWSER_NAME", "opera")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self) -> None:
        """get_settings returns one instance until the cache is cleared."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
