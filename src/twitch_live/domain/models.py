from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from twitch_live.errors import ConfigError


class ConfiguredBaseModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class TwitchAppCreds(ConfiguredBaseModel):
    client_id: str
    client_secret: str


class StreamSnapshot(ConfiguredBaseModel):
    """Entry of ``/helix/streams`` for a broadcaster that is live right now."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    user_id: str
    user_login: str
    user_name: str
    game_id: str = ""
    game_name: str = ""
    type: str = "live"
    title: str = ""
    viewer_count: int = 0
    started_at: datetime
    language: str = ""
    thumbnail_url: str = ""

    def thumbnail(self, width: int = 1280, height: int = 720) -> str:
        return self.thumbnail_url.replace("{width}", str(width)).replace(
            "{height}", str(height)
        )


class EmbedFooter(ConfiguredBaseModel):
    text: str


class EmbedPayload(ConfiguredBaseModel):
    """Chat-agnostic rich embed produced by the renderer."""

    title: str
    url: str
    description: str
    color: int
    footer: EmbedFooter
    image_url: str | None = None


class EveryoneMention(ConfiguredBaseModel):
    kind: Literal["everyone"] = "everyone"

    def render(self) -> str:
        return "@everyone"


class HereMention(ConfiguredBaseModel):
    kind: Literal["here"] = "here"

    def render(self) -> str:
        return "@here"


class RoleMention(ConfiguredBaseModel):
    kind: Literal["role"] = "role"
    role_id: int

    def render(self) -> str:
        return f"<@&{self.role_id}>"


Mention = Annotated[
    EveryoneMention | HereMention | RoleMention, Field(discriminator="kind")
]

_MENTION_TOKEN_RE = re.compile(r"^<@&(\d+)>$|^(\d+)$")


def parse_mention(token: str) -> Mention:
    """Resolve a configured role token into a :data:`Mention`.

    ``everyone`` and ``here`` map to the broadcast mentions, anything else must
    be a role id, either bare or already in ``<@&id>`` form.
    """

    value = token.strip()
    if value.lower() in {"everyone", "@everyone"}:
        return EveryoneMention()
    if value.lower() in {"here", "@here"}:
        return HereMention()
    match = _MENTION_TOKEN_RE.fullmatch(value)
    if match is None:
        raise ConfigError(
            message=f"Can't interpret ping role {token!r}",
            context={"ping_role": token},
        )
    return RoleMention(role_id=int(match.group(1) or match.group(2)))
