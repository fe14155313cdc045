"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The captcha options dict (``timeout``, ``hide_badge``, ``polyfill_url``) is
derived from CaptchaSettings so InvisibleReCaptcha stays framework-agnostic.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLYFILL_URL = "https://cdnjs.cloudflare.com/polyfill/v3/polyfill.min.js"


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    recaptcha_site_key: str = ""
    recaptcha_secret_key: str = ""

    # Seconds; passed to the httpx client
    recaptcha_timeout: float = 5.0
    recaptcha_hide_badge: bool = False
    recaptcha_polyfill_url: str = DEFAULT_POLYFILL_URL

    def options(self) -> dict[str, Any]:
        return {
            "timeout": self.recaptcha_timeout,
            "hide_badge": self.recaptcha_hide_badge,
            "polyfill_url": self.recaptcha_polyfill_url,
        }


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    secret_key: str = ""
    env: str = "development"

    # Reverse proxies in front of the app whose X-Forwarded-For is trusted;
    # 0 means the client IP is always REMOTE_ADDR
    trusted_proxy_count: int = 0

    # Sub-configs (composed via model_validator below)
    captcha: Optional[CaptchaSettings] = None
    logging: Optional[LoggingSettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.captcha is None:
            self.captcha = CaptchaSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
