from __future__ import annotations

import asyncio
import contextlib

import discord
from loguru import logger

from twitch_live.application.ports import TwitchClientProtocol
from twitch_live.application.watcher import StreamWatcher


def default_intents() -> discord.Intents:
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    return intents


class LiveNotifierClient(discord.Client):
    """Discord connection the stream message is posted through."""

    def __init__(self, *, intents: discord.Intents | None = None) -> None:
        super().__init__(intents=intents or default_intents())

    async def on_ready(self) -> None:
        logger.info(f"Discord client ready, logged in as {self.user}")

    async def on_resumed(self) -> None:
        logger.debug("Discord session resumed")

    async def on_disconnect(self) -> None:
        logger.warning("Discord client disconnected")


class DiscordBot:
    """Run the Discord client and start the watcher once the client is ready."""

    def __init__(
        self,
        client: discord.Client,
        token: str,
        twitch: TwitchClientProtocol,
        watcher: StreamWatcher,
        *,
        startup_delay: float,
        interval: float,
        task_timeout: float = 5.0,
    ) -> None:
        self.client = client
        self.token = token
        self.twitch = twitch
        self.watcher = watcher
        self.startup_delay = startup_delay
        self.interval = interval
        self.task_timeout = task_timeout

    async def run(self, stop: asyncio.Event) -> None:
        async with self.client:
            client_task = asyncio.create_task(
                self.client.start(self.token), name="discord-client"
            )
            client_task.add_done_callback(lambda _: stop.set())
            ready = asyncio.create_task(
                self.client.wait_until_ready(), name="discord-ready"
            )
            stopped = asyncio.create_task(stop.wait(), name="stop-requested")
            await asyncio.wait(
                {client_task, ready, stopped}, return_when=asyncio.FIRST_COMPLETED
            )
            ready.cancel()
            stopped.cancel()
            if not self.client.is_ready():
                await self._close(client_task)
                return

            logger.info(
                f"Tracking {self.watcher.login}: first poll in "
                f"{self.startup_delay}s, then every {self.interval}s"
            )
            await self.twitch.refresh_token()
            watch_task = asyncio.create_task(
                self.watcher.watch(
                    stop, interval=self.interval, startup_delay=self.startup_delay
                ),
                name="stream-watcher",
            )
            try:
                await stop.wait()
            finally:
                stop.set()
                try:
                    await asyncio.wait_for(watch_task, timeout=self.task_timeout)
                except TimeoutError:
                    watch_task.cancel()
                    await asyncio.gather(watch_task, return_exceptions=True)
                await self._close(client_task)

    async def _close(self, client_task: asyncio.Task[None]) -> None:
        await self.client.close()
        if client_task.done() and not client_task.cancelled():
            # surfaces login failures and gateway errors
            client_task.result()
            return
        with contextlib.suppress(asyncio.CancelledError):
            await client_task
