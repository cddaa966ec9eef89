from __future__ import annotations

from dataclasses import dataclass, field

from twitch_live.errors import AppError


@dataclass(frozen=True, slots=True, kw_only=True)
class InfraError(AppError):
    """Base exception for infrastructure layer."""


@dataclass(frozen=True, slots=True, kw_only=True)
class TwitchAuthError(InfraError):
    message: str = field(init=False, default="TWITCH_CID and TWITCH_SECRET must be set")
    code: str = field(init=False, default="INFRA_TWITCH_CREDS_MISSING")


@dataclass(frozen=True, slots=True, kw_only=True)
class ChannelNotFoundError(InfraError):
    channel_id: int
    guild_id: int
    message: str = field(init=False)
    code: str = field(init=False, default="INFRA_CHANNEL_NOT_FOUND")

    def __post_init__(self) -> None:  # pragma: no cover - formatting helper
        object.__setattr__(
            self,
            "message",
            f"Can't find text channel {self.channel_id} in server {self.guild_id}",
        )
        object.__setattr__(
            self,
            "context",
            {"channel_id": self.channel_id, "guild_id": self.guild_id},
        )
