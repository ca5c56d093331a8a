"""
Sink Transport Configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SinkSettings(BaseSettings):
    """Where forwarded records are delivered."""

    model_config = SettingsConfigDict(
        env_prefix="LB_SINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    url: str | None = Field(default=None, description="HTTP endpoint receiving {level, message} JSON bodies")
    timeout_seconds: float = Field(default=5.0, gt=0, description="Per-request timeout")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers")
