from __future__ import annotations

from typing import Any

import discord
from loguru import logger

from twitch_live.application.error import NotificationDeliveryError
from twitch_live.application.ports import NotifierProtocol
from twitch_live.domain.models import (
    EmbedPayload,
    EveryoneMention,
    HereMention,
    Mention,
)
from twitch_live.infrastructure.error import ChannelNotFoundError

_DELIVERY_ERRORS = (discord.DiscordException, ChannelNotFoundError, OSError)


def to_discord_embed(payload: EmbedPayload) -> discord.Embed:
    embed = discord.Embed(
        title=payload.title,
        url=payload.url,
        description=payload.description,
        color=payload.color,
    )
    embed.set_footer(text=payload.footer.text)
    if payload.image_url:
        embed.set_image(url=payload.image_url)
    return embed


def allowed_mentions_for(mention: Mention | None) -> discord.AllowedMentions:
    """Allow pinging exactly the configured mention and nothing else."""

    if mention is None:
        return discord.AllowedMentions.none()
    if isinstance(mention, (EveryoneMention, HereMention)):
        return discord.AllowedMentions(everyone=True, users=False, roles=False)
    return discord.AllowedMentions(
        everyone=False, users=False, roles=[discord.Object(id=mention.role_id)]
    )


class DiscordNotifier(NotifierProtocol):
    def __init__(self, client: discord.Client, guild_id: int, channel_id: int):
        self.client = client
        self.guild_id = guild_id
        self.channel_id = channel_id

    async def send(
        self, content: str, embed: EmbedPayload, mention: Mention | None = None
    ) -> discord.Message:
        try:
            channel = await self._channel()
            return await channel.send(
                content=content,
                embed=to_discord_embed(embed),
                allowed_mentions=allowed_mentions_for(mention),
            )
        except _DELIVERY_ERRORS as e:
            logger.opt(exception=e).error("Discord send failed")
            raise NotificationDeliveryError(
                message="Discord send failed", context={"error": repr(e)}
            ) from e

    async def edit(
        self, handle: discord.Message, content: str, embed: EmbedPayload
    ) -> None:
        try:
            await handle.edit(
                content=content,
                embed=to_discord_embed(embed),
                allowed_mentions=discord.AllowedMentions.none(),
            )
        except _DELIVERY_ERRORS as e:
            logger.opt(exception=e).error("Discord edit failed")
            raise NotificationDeliveryError(
                message="Discord edit failed",
                context={"error": repr(e), "message_id": getattr(handle, "id", None)},
            ) from e

    async def _channel(self) -> Any:
        channel = self.client.get_channel(self.channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(self.channel_id)
        guild = getattr(channel, "guild", None)
        if not hasattr(channel, "send") or guild is None or guild.id != self.guild_id:
            raise ChannelNotFoundError(
                channel_id=self.channel_id, guild_id=self.guild_id
            )
        return channel
