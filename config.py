"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The captcha bypass switch (SKIP_RECAPTCHA) only takes effect when ENV is
exactly "development"; an unset ENV counts as production.
AppSettings.captcha_bypass_enabled is the single place that decides it.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    captcha_provider: Literal["recaptcha", "hcaptcha"] = "recaptcha"
    recaptcha_secret_key: str = ""
    hcaptcha_secret: str = ""
    captcha_timeout_seconds: float = Field(default=5.0, gt=0)

    # Non-production only; ignored when ENV=production
    skip_recaptcha: bool = False

    @property
    def secret(self) -> str:
        if self.captcha_provider == "hcaptcha":
            return self.hcaptcha_secret
        return self.recaptcha_secret_key


class ThrottleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    login_max_attempts: int = Field(default=3, ge=1)
    login_lockout_seconds: int = Field(default=900, gt=0)

    # Eviction policy for the in-memory attempt registry
    throttle_idle_ttl_seconds: int = Field(default=86400, gt=0)
    throttle_max_records: int = Field(default=100_000, ge=1)

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(seconds=self.login_lockout_seconds)

    @property
    def idle_ttl(self) -> timedelta:
        return timedelta(seconds=self.throttle_idle_ttl_seconds)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    # Unset means production so non-production switches fail closed
    env: str = "production"
    app_name: str = "course-review-auth"

    # CORS: all origins, credentials allowed
    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    captcha: Optional[CaptchaSettings] = None
    throttle: Optional[ThrottleSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.captcha is None:
            self.captcha = CaptchaSettings()
        if self.throttle is None:
            self.throttle = ThrottleSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def captcha_bypass_enabled(self) -> bool:
        return self.captcha.skip_recaptcha and self.env == "development"
