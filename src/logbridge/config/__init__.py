"""
logbridge Configuration Module.

Nested settings: each sub-module is an independent concern with its own
environment variable prefix.

Multi-Environment Support:
    Set `LB_ENV` to one of: development, testing, staging, production
    The following .env files are loaded (later overrides earlier):
    1. .env
    2. .env.local
    3. .env.{environment}
    4. .env.{environment}.local

Usage:
    from logbridge.config import settings

    settings.bridge.dedup_window_ms  # 1500
    settings.sink.url
    settings.logging.level
"""

from functools import cached_property
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from .bridge import BridgeSettings
from .logging import LoggingSettings
from .sink import SinkSettings


def _get_env_files() -> tuple[str, ...]:
    env = os.getenv("LB_ENV", "development")
    return (
        ".env",
        ".env.local",
        f".env.{env}",
        f".env.{env}.local",
    )


class Settings(BaseSettings):
    """Composite settings aggregating all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=_get_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def bridge(self) -> BridgeSettings:
        return BridgeSettings()

    @cached_property
    def sink(self) -> SinkSettings:
        return SinkSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


settings = Settings()

__all__ = [
    "BridgeSettings",
    "LoggingSettings",
    "Settings",
    "SinkSettings",
    "settings",
]
