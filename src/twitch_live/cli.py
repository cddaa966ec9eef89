from __future__ import annotations

import asyncio
import signal
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator

import typer
from dependency_injector.wiring import Provide, inject
from loguru import logger
from pydantic import ValidationError

from twitch_live.application.ports import TwitchClientProtocol
from twitch_live.application.watcher import StreamWatcher
from twitch_live.errors import AppError
from twitch_live.infrastructure.bot import DiscordBot
from twitch_live.infrastructure.error import InfraError
from twitch_live.infrastructure.error_utils import log_and_wrap
from twitch_live.infrastructure.logs import setup_logging

from .config import Settings
from .container import AppContainer, build_container, shutdown_container

app = typer.Typer(
    name="twitch-live-notifier",
    help="Announce a Twitch stream in a Discord channel and keep the message up to date",
)


def load_settings() -> Settings:
    """Read settings from the environment or exit with code 2."""
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration:\n{e}")
        raise typer.Exit(2)
    setup_logging(settings.log_level)
    return settings


async def entry_point(
    settings: Settings,
    func: Callable[[], Awaitable[int]],
    *,
    dry_run: bool = False,
) -> int:
    container = await build_container(settings, dry_run=dry_run)
    container.wire(modules=[__name__])
    try:
        return await func()
    finally:
        await shutdown_container(container)
        container.unwire()


@contextmanager
def stop_on_signals(stop: asyncio.Event) -> Iterator[None]:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop.set)
    try:
        yield
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)


async def run_console(
    watcher: StreamWatcher,
    twitch: TwitchClientProtocol,
    stop: asyncio.Event,
    *,
    interval: float,
    startup_delay: float = 0.0,
) -> None:
    """Watch without Discord; stream messages go to the log."""

    await twitch.refresh_token()
    await watcher.watch(stop, interval=interval, startup_delay=startup_delay)


@inject
async def _run(
    stop: asyncio.Event,
    dry_run: bool,
    settings: Settings = Provide[AppContainer.settings],
    twitch: TwitchClientProtocol = Provide[AppContainer.twitch_client],
    watcher: StreamWatcher = Provide[AppContainer.watcher],
    bot: DiscordBot = Provide[AppContainer.bot],
) -> int:
    logger.info(
        f"Starting notifier for {settings.twitch_username} "
        f"(server {settings.server_id}, channel {settings.streaming_channel_id})"
    )
    try:
        with stop_on_signals(stop):
            if dry_run:
                await run_console(
                    watcher,
                    twitch,
                    stop,
                    interval=settings.poll_interval,
                    startup_delay=settings.startup_delay,
                )
            else:
                await bot.run(stop)
    except Exception as exc:
        log_and_wrap(exc, InfraError, context={"reason": "bot_failed"})
    return 0


@inject
async def _check(
    settings: Settings = Provide[AppContainer.settings],
    twitch: TwitchClientProtocol = Provide[AppContainer.twitch_client],
) -> int:
    try:
        stream = await twitch.get_stream(settings.twitch_username)
    except AppError as e:
        typer.echo(f"lookup failed: {e}", err=True)
        return 1
    if stream is None:
        typer.echo(f"{settings.twitch_username} is offline")
        return 0
    game = await twitch.get_game_name(stream.game_id) if stream.game_id else None
    typer.echo(f"{stream.user_name} is live: {stream.title}")
    typer.echo(f"playing: {game or '-'}")
    typer.echo(f"viewers: {stream.viewer_count:,}")
    typer.echo(f"started at: {stream.started_at.isoformat()}")
    return 0


@app.command("run", help="Connect to Discord and announce the tracked stream")
def run(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Log stream messages instead of posting to Discord"
    ),
) -> None:
    settings = load_settings()
    stop = asyncio.Event()
    try:
        code = asyncio.run(
            entry_point(settings, lambda: _run(stop, dry_run), dry_run=dry_run)
        )
    except AppError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    raise typer.Exit(code)


@app.command("check", help="Look up the tracked login once and print its status")
def check() -> None:
    settings = load_settings()
    raise typer.Exit(asyncio.run(entry_point(settings, _check, dry_run=True)))


@app.callback()
def root() -> None:
    """Root command for twitch-live-notifier."""


def main() -> None:  # pragma: no cover - CLI entry point
    """Entrypoint for the CLI."""
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
