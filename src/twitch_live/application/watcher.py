from __future__ import annotations

import asyncio
from enum import Enum

from loguru import logger

from twitch_live.application.error import (
    NotificationDeliveryError,
    StreamLookupError,
    TickError,
)
from twitch_live.domain.models import Mention, StreamSnapshot
from twitch_live.domain.protocols import Clock
from twitch_live.domain.session import SessionState

from . import render
from .ports import NotifierProtocol, TwitchClientProtocol


class Transition(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    UPDATED = "updated"
    ENDED = "ended"
    SKIPPED = "skipped"
    FAILED = "failed"


class StreamWatcher:
    """Poll one Twitch login and mirror its live period into one chat message."""

    def __init__(
        self,
        twitch: TwitchClientProtocol,
        notifier: NotifierProtocol,
        state: SessionState,
        clock: Clock,
        *,
        login: str,
        mention: Mention,
        max_end_attempts: int = 0,
    ) -> None:
        self.twitch = twitch
        self.notifier = notifier
        self.state = state
        self.clock = clock
        self.login = login
        self.mention = mention
        self.max_end_attempts = max_end_attempts

    async def run_once(self) -> Transition:
        """Run a single poll-and-reconcile tick.

        Never raises: unexpected errors are logged and the tick ends with
        :attr:`Transition.FAILED`, leaving the state as far as it got.
        """

        try:
            return await self._reconcile()
        except Exception as e:
            err = TickError(login=self.login, error=e)
            logger.opt(exception=e).error(
                "{} ({}): {}", err.message, err.code, err.context
            )
            return Transition.FAILED

    async def _reconcile(self) -> Transition:
        try:
            snapshot = await self.twitch.get_stream(self.login)
        except StreamLookupError as e:
            logger.warning(f"Skipping tick: {e}")
            return Transition.SKIPPED

        if snapshot is None:
            if not self.state.is_streaming:
                return Transition.IDLE
            return await self._end()

        self.state.failed_end_attempts = 0
        await self._update_statistics(snapshot)
        if not self.state.is_streaming:
            return await self._start()
        if self.state.message is None:
            logger.debug("Start message is still being sent, skipping tick")
            return Transition.SKIPPED
        return await self._continue()

    async def _update_statistics(self, snapshot: StreamSnapshot) -> None:
        game_name = None
        if snapshot.game_id:
            game_name = await self.twitch.get_game_name(snapshot.game_id)
        self.state.apply(snapshot, game_name)

    async def _start(self) -> Transition:
        logger.info(f"{self.login} is live, sending stream message")
        self.state.mark_live()
        try:
            embed = render.build_embed(
                self.state, self.login, stream_over=False, now=self.clock.now()
            )
            self.state.message = await self.notifier.send(
                render.start_text(self.state, self.mention), embed, self.mention
            )
        except NotificationDeliveryError as e:
            self.state.is_streaming = False
            logger.warning(f"Stream message was not sent, will retry: {e}")
            return Transition.FAILED
        except Exception:
            self.state.is_streaming = False
            raise
        logger.info("Stream message sent successfully")
        return Transition.STARTED

    async def _continue(self) -> Transition:
        embed = render.build_embed(
            self.state, self.login, stream_over=False, now=self.clock.now()
        )
        try:
            await self.notifier.edit(
                self.state.message, render.live_text(self.state), embed
            )
        except NotificationDeliveryError as e:
            logger.warning(f"Stream message was not updated: {e}")
            return Transition.FAILED
        logger.debug(
            f"Updated stream message: viewers={self.state.viewers} "
            f"peak={self.state.peak_viewers}"
        )
        return Transition.UPDATED

    async def _end(self) -> Transition:
        if self.state.message is None:
            logger.debug("Start message is still being sent, skipping tick")
            return Transition.SKIPPED
        logger.info(f"{self.login} ended the stream, cleaning up message")
        embed = render.build_embed(
            self.state, self.login, stream_over=True, now=self.clock.now()
        )
        try:
            await self.notifier.edit(
                self.state.message, render.end_text(self.state), embed
            )
        except NotificationDeliveryError as e:
            self.state.failed_end_attempts += 1
            attempts = self.state.failed_end_attempts
            if self.max_end_attempts and attempts >= self.max_end_attempts:
                logger.error(
                    f"End-of-stream edit failed {attempts} times, "
                    f"dropping the live period: {e}"
                )
                self.state.reset()
                return Transition.ENDED
            logger.warning(f"End-of-stream edit failed (attempt {attempts}): {e}")
            return Transition.FAILED
        # Reset only after the edit went through.
        self.state.reset()
        logger.info("Successfully cleaned up")
        return Transition.ENDED

    async def watch(
        self,
        stop_event: asyncio.Event,
        *,
        interval: float,
        startup_delay: float = 0.0,
    ) -> None:
        """Tick every *interval* seconds until *stop_event* is set.

        Ticks run one after another, so state and credential refreshes are
        only ever touched from a single flow.
        """

        if await self._wait(stop_event, startup_delay):
            return
        logger.info(f"Watching {self.login} every {interval}s")
        while not stop_event.is_set():
            transition = await self.run_once()
            logger.trace(f"tick finished: {transition.value}")
            if await self._wait(stop_event, interval):
                break

    @staticmethod
    async def _wait(stop_event: asyncio.Event, timeout: float) -> bool:
        """Return ``True`` if *stop_event* got set within *timeout* seconds."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True
