from __future__ import annotations

from typing import Any, Protocol

from twitch_live.domain.models import EmbedPayload, Mention, StreamSnapshot

# Whatever the chat surface returns for a sent message; only the notifier
# that produced it knows how to use it.
MessageHandle = Any


class TwitchClientProtocol(Protocol):
    async def refresh_token(self, force: bool = False) -> bool: ...  # pragma: no cover

    async def get_stream(
        self, login: str
    ) -> StreamSnapshot | None: ...  # pragma: no cover

    async def get_game_name(self, game_id: str) -> str | None: ...  # pragma: no cover


class NotifierProtocol(Protocol):
    async def send(
        self, content: str, embed: EmbedPayload, mention: Mention | None = None
    ) -> MessageHandle: ...  # pragma: no cover

    async def edit(
        self, handle: MessageHandle, content: str, embed: EmbedPayload
    ) -> None: ...  # pragma: no cover
