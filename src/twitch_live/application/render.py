"""Text and embed rendering for the stream notification message."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import humanize

from twitch_live.domain.models import EmbedFooter, EmbedPayload, Mention
from twitch_live.domain.session import SessionState

EMBED_COLOR = 12910847
TWITCH_CHANNEL_URL = "https://twitch.tv/{login}"

_MINIMUM_UNIT_STEPS: tuple[tuple[timedelta, str], ...] = (
    (timedelta(days=1), "hours"),
    (timedelta(hours=1), "minutes"),
)


def format_uptime(delta: timedelta) -> str:
    """Render *delta* with its two largest units, e.g. ``2 hours, 14 minutes``."""

    if delta < timedelta(0):
        delta = timedelta(0)
    minimum_unit = "seconds"
    for threshold, unit in _MINIMUM_UNIT_STEPS:
        if delta >= threshold:
            minimum_unit = unit
            break
    text = humanize.precisedelta(
        delta,
        minimum_unit=minimum_unit,
        suppress=("months", "years"),
        format="%0.0f",
    )
    return text.replace(" and ", ", ")


def _count(value: int) -> str:
    return f"{value:,}"


def build_embed(
    state: SessionState,
    login: str,
    stream_over: bool = False,
    now: datetime | None = None,
) -> EmbedPayload:
    now = now or datetime.now(timezone.utc)
    if stream_over:
        lines = [
            f"Last seen playing: **{state.playing or 'Was not playing a game'}**",
            f"Peak viewers: **{_count(state.peak_viewers)}**",
        ]
    else:
        lines = [
            f"Playing: **{state.playing or 'Not playing a game'}**",
            f"Viewers: **{_count(state.viewers)}** "
            f"[Peak: **{_count(state.peak_viewers)}**]",
        ]
    lines.append(f"Stream language: **{state.language}**")

    uptime = now - state.started_at if state.started_at else timedelta(0)
    verb = "was" if stream_over else "has been"
    return EmbedPayload(
        title=f"**{state.title}**",
        url=TWITCH_CHANNEL_URL.format(login=login),
        description="\n".join(lines),
        color=EMBED_COLOR,
        footer=EmbedFooter(text=f"Stream {verb} up for: {format_uptime(uptime)}"),
        image_url=state.thumbnail,
    )


def live_text(state: SessionState) -> str:
    playing = f" **{state.playing}**" if state.playing else ""
    return f"🔴 {state.username} is currently streaming{playing}!"


def start_text(state: SessionState, mention: Mention) -> str:
    playing = f" Playing: **{state.playing}**" if state.playing else ""
    return f"🔴 {mention.render()}, {state.username} is now live!{playing}"


def end_text(state: SessionState) -> str:
    return f"🚫 {state.username} has ended the stream. Tune in next time!"
