"""
Capture Pipeline Configuration.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Both fragments must appear, in either order.
DEFAULT_IGNORE_PATTERNS = (r"^(?=.*\[vite\] failed to reload)(?=.*see errors above)",)


class BridgeSettings(BaseSettings):
    """Limits and filters applied between interception and dispatch."""

    model_config = SettingsConfigDict(
        env_prefix="LB_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    max_message_length: int = Field(default=12000, gt=0, description="Forwarded messages are truncated past this")
    max_depth: int = Field(default=5, gt=0, description="Serialization depth ceiling")
    dedup_window_ms: float = Field(default=1500, ge=0, description="Identical records inside this window are dropped")
    ignore_patterns: tuple[str, ...] = Field(
        default=DEFAULT_IGNORE_PATTERNS,
        description="Case-insensitive regexes for messages that are never forwarded",
    )

    devtool_label: str = Field(default="[vite:error]", description="Prefix for rendered dev-tool detail lines")
    devtool_event: str = Field(default="vite:error", description="Hot-reload channel event carrying errors")

    capture_stdlib: bool = Field(default=False, description="Also route stdlib logging records to the sink")
    capture_threads: bool = Field(default=True, description="Capture uncaught errors raised in threads")
    console_logger: str = Field(default="logbridge.console", description="Logger backing the host console")
    flush_timeout_seconds: float = Field(
        default=2.0, ge=0, description="How long uncaught errors and interpreter exit wait for pending records"
    )

    @field_validator("ignore_patterns")
    @classmethod
    def _compile_check(cls, patterns: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid ignore pattern {pattern!r}: {exc}") from exc
        return patterns
