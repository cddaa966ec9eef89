from __future__ import annotations

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from twitch_live.domain.models import parse_mention
from twitch_live.errors import ConfigError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,25}$", re.ASCII)


class Settings(BaseSettings):
    bot_token: str = Field(default=..., min_length=1, validation_alias="BOT_TOKEN")
    twitch_username: str = Field(default=..., validation_alias="TWITCH_USERNAME")
    twitch_client_id: str = Field(
        default=..., min_length=1, validation_alias="TWITCH_CID"
    )
    twitch_client_secret: str = Field(
        default=..., min_length=1, validation_alias="TWITCH_SECRET"
    )
    server_id: int = Field(default=..., gt=0, validation_alias="SERVER_ID")
    streaming_channel_id: int = Field(
        default=..., gt=0, validation_alias="STREAMING_CHANNEL_ID"
    )
    ping_role: str = Field(default=..., validation_alias="PING_ROLE")

    startup_delay: float = Field(default=10.0, ge=0, validation_alias="STARTUP_DELAY")
    poll_interval: float = Field(default=30.0, gt=0, validation_alias="POLL_INTERVAL")
    http_timeout: float = Field(default=10.0, gt=0, validation_alias="HTTP_TIMEOUT")
    max_end_attempts: int = Field(default=5, ge=0, validation_alias="MAX_END_ATTEMPTS")
    limiter_max_rate: float = Field(default=10, gt=0, validation_alias="LIMITER_MAX_RATE")
    limiter_time_period: float = Field(
        default=10.0, gt=0, validation_alias="LIMITER_TIME_PERIOD"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("twitch_username", mode="after")
    @classmethod
    def _check_username(cls, v: str) -> str:
        if not USERNAME_RE.fullmatch(v):
            raise ValueError("must be a Twitch login (3-25 letters, digits, '_')")
        return v.lower()

    @field_validator("ping_role", mode="after")
    @classmethod
    def _check_ping_role(cls, v: str) -> str:
        try:
            parse_mention(v)
        except ConfigError as e:
            raise ValueError(e.message) from e
        return v.strip()

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    task_timeout: int = 5
