"""Suite settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """E2E suite configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.test"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application under test
    base_url: str = Field(
        default="http://localhost:3000", description="Frontend base URL"
    )

    # Principals
    test_user_email: str = Field(
        default="testuser@example.com", description="Standard test user email"
    )
    test_user_password: SecretStr = Field(
        default=SecretStr("TestUser123!"), description="Standard test user password"
    )
    test_user_name: str = Field(default="Test User", description="Standard test user name")
    test_admin_email: str = Field(
        default="admin@example.com", description="Administrator email"
    )
    test_admin_password: SecretStr = Field(
        default=SecretStr("admin123"), description="Administrator password"
    )
    test_admin_name: str = Field(default="Admin User", description="Administrator name")

    # Timeout tiers (milliseconds)
    timeout_short_ms: int = Field(default=5_000, ge=1, description="Short tier")
    timeout_medium_ms: int = Field(default=10_000, ge=1, description="Medium tier")
    timeout_long_ms: int = Field(default=30_000, ge=1, description="Long tier")
    navigation_timeout_ms: int = Field(
        default=60_000, ge=1, description="Page load timeout"
    )
    poll_interval_ms: int = Field(
        default=200, description="Interval between condition checks"
    )

    # Action retry
    retry_max_attempts: int = Field(default=3, ge=1, description="Attempts per action")
    retry_attempt_timeout_ms: int = Field(
        default=5_000, ge=1, description="Timeout of a single action attempt"
    )
    retry_backoff_ms: int = Field(default=250, ge=0, description="Delay between attempts")

    # Browser
    browser_name: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Playwright browser type"
    )
    headless: bool = Field(default=True, description="Run browser headless")
    slow_mo_ms: int = Field(default=0, ge=0, description="Delay between browser operations")
    viewport_width: int = Field(default=1920, ge=1)
    viewport_height: int = Field(default=1080, ge=1)

    # Visual regression
    snapshot_dir: str = Field(
        default="tests/visual/__snapshots__", description="Screenshot baseline directory"
    )
    update_snapshots: bool = Field(
        default=False, description="Overwrite baselines instead of comparing"
    )
    snapshot_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Per-pixel colour distance tolerated by screenshot comparison",
    )
    snapshot_max_diff_ratio: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of differing pixels tolerated by screenshot comparison",
    )

    # Failure artifacts
    artifacts_dir: str = Field(
        default="test-results", description="Where failure screenshots and traces go"
    )
    screenshot_on_failure: bool = Field(
        default=True, description="Save a full-page screenshot when a test fails"
    )
    trace_on_failure: bool = Field(
        default=True, description="Record a Playwright trace, kept only when a test fails"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    debug: bool = Field(default=False, description="Pretty console logs")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("poll_interval_ms")
    @classmethod
    def validate_poll_interval(cls, v: int) -> int:
        """Poll interval must be positive."""
        if v <= 0:
            raise ValueError("Poll interval must be positive")
        return v

    @model_validator(mode="after")
    def validate_timeout_tiers(self) -> "Settings":
        """Tiers must be ordered short <= medium <= long."""
        if not self.timeout_short_ms <= self.timeout_medium_ms <= self.timeout_long_ms:
            raise ValueError(
                "Timeout tiers must satisfy short <= medium <= long "
                f"(got {self.timeout_short_ms}/{self.timeout_medium_ms}/{self.timeout_long_ms})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
