"""Adapters for Twitch, Discord and the process environment."""

from .bot import DiscordBot, LiveNotifierClient
from .twitch import TwitchClient

__all__ = ["DiscordBot", "LiveNotifierClient", "TwitchClient"]
