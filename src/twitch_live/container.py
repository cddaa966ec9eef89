from __future__ import annotations

from typing import AsyncIterator, Awaitable

from aiolimiter import AsyncLimiter
from dependency_injector import containers, providers

from twitch_live.application.watcher import StreamWatcher
from twitch_live.domain.models import TwitchAppCreds, parse_mention
from twitch_live.domain.session import SessionState
from twitch_live.infrastructure.bot import DiscordBot, LiveNotifierClient
from twitch_live.infrastructure.notifier.console import ConsoleNotifier
from twitch_live.infrastructure.notifier.discord import DiscordNotifier
from twitch_live.infrastructure.system import SystemClock
from twitch_live.infrastructure.twitch import TwitchClient

from .config import Settings

# ---------- low-level resources ----------


async def _twitch_client_resource(
    creds: TwitchAppCreds,
    timeout: float,
    async_limiter: AsyncLimiter | None = None,
) -> AsyncIterator[TwitchClient]:
    client = TwitchClient.from_creds(
        creds, timeout=timeout, async_limiter=async_limiter
    )
    try:
        yield client
    finally:
        await client.aclose()


# ---------- DI container ----------
class AppContainer(containers.DeclarativeContainer):
    """Dependency Injector container for the app."""

    settings = providers.Singleton(Settings)
    container_config = providers.Configuration()

    # Twitch
    twitch_creds = providers.Singleton(
        TwitchAppCreds,
        client_id=container_config.twitch_client_id,
        client_secret=container_config.twitch_client_secret,
    )
    async_limiter = providers.Factory(
        AsyncLimiter,
        container_config.limiter_max_rate.as_float(),
        container_config.limiter_time_period.as_float(),
    )
    twitch_client = providers.Resource(
        _twitch_client_resource,
        creds=twitch_creds,
        timeout=container_config.http_timeout.as_float(),
        async_limiter=async_limiter,
    )

    # Discord
    discord_client = providers.Singleton(LiveNotifierClient)
    notifier = providers.Singleton(
        DiscordNotifier,
        client=discord_client,
        guild_id=container_config.server_id.as_int(),
        channel_id=container_config.streaming_channel_id.as_int(),
    )
    console_notifier = providers.Singleton(ConsoleNotifier)

    # Session
    session_state = providers.Singleton(SessionState)
    clock = providers.Singleton(SystemClock)
    mention = providers.Singleton(parse_mention, container_config.ping_role)

    # Application actors
    watcher = providers.Singleton(
        StreamWatcher,
        twitch=twitch_client,
        notifier=notifier,
        state=session_state,
        clock=clock,
        login=container_config.twitch_username,
        mention=mention,
        max_end_attempts=container_config.max_end_attempts.as_int(),
    )

    bot = providers.Factory(
        DiscordBot,
        client=discord_client,
        token=container_config.bot_token,
        twitch=twitch_client,
        watcher=watcher,
        startup_delay=container_config.startup_delay.as_float(),
        interval=container_config.poll_interval.as_float(),
        task_timeout=container_config.task_timeout.as_float(),
    )


# ---------- bootstrap helpers ----------


async def build_container(settings: Settings, *, dry_run: bool = False) -> AppContainer:
    """Create container, load config, init async resources.

    With *dry_run* the watcher reports to the console instead of Discord.
    """
    container = AppContainer()
    container.settings.override(providers.Object(settings))
    container.container_config.from_pydantic(settings)  # pyright: ignore
    if dry_run:
        container.notifier.override(container.console_notifier)
    aw = container.init_resources()
    if isinstance(aw, Awaitable):
        await aw
    return container


async def shutdown_container(container: AppContainer) -> None:
    """Graceful shutdown of resources."""
    aw = container.shutdown_resources()
    if isinstance(aw, Awaitable):
        await aw
