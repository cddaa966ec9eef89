from datetime import timedelta

import pytest
from conftest import STARTED_AT

from twitch_live.application import render
from twitch_live.domain.models import EveryoneMention, HereMention, RoleMention
from twitch_live.domain.session import SessionState


def live_state(**overrides: object) -> SessionState:
    state = SessionState(
        is_streaming=True,
        message=1,
        viewers=1234,
        peak_viewers=5678,
        playing="Chess",
        title="Opening prep",
        started_at=STARTED_AT,
        thumbnail="https://cdn/foo-1280x720.jpg",
        language="en",
        username="Foo",
    )
    for key, value in overrides.items():
        setattr(state, key, value)
    return state


def test_live_embed() -> None:
    embed = render.build_embed(
        live_state(), "foo", now=STARTED_AT + timedelta(hours=2, minutes=14)
    )

    assert embed.title == "**Opening prep**"
    assert embed.url == "https://twitch.tv/foo"
    assert embed.description == (
        "Playing: **Chess**\n"
        "Viewers: **1,234** [Peak: **5,678**]\n"
        "Stream language: **en**"
    )
    assert embed.color == 12910847
    assert embed.footer.text == "Stream has been up for: 2 hours, 14 minutes"
    assert embed.image_url == "https://cdn/foo-1280x720.jpg"


def test_ended_embed_without_game() -> None:
    embed = render.build_embed(
        live_state(playing=None),
        "foo",
        stream_over=True,
        now=STARTED_AT + timedelta(minutes=5, seconds=3),
    )

    assert embed.description == (
        "Last seen playing: **Was not playing a game**\n"
        "Peak viewers: **5,678**\n"
        "Stream language: **en**"
    )
    assert embed.footer.text == "Stream was up for: 5 minutes, 3 seconds"


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(hours=2, minutes=14), "2 hours, 14 minutes"),
        (timedelta(days=1, hours=3, minutes=20), "1 day, 3 hours"),
        (timedelta(minutes=7, seconds=9), "7 minutes, 9 seconds"),
        (timedelta(seconds=42), "42 seconds"),
        (timedelta(hours=3), "3 hours"),
    ],
)
def test_format_uptime_two_largest_units(delta: timedelta, expected: str) -> None:
    assert render.format_uptime(delta) == expected


def test_format_uptime_clamps_negative() -> None:
    assert render.format_uptime(timedelta(seconds=-5)) == render.format_uptime(
        timedelta(0)
    )


def test_message_texts() -> None:
    state = live_state()

    assert render.live_text(state) == "🔴 Foo is currently streaming **Chess**!"
    assert render.end_text(state) == "🚫 Foo has ended the stream. Tune in next time!"
    assert (
        render.start_text(state, RoleMention(role_id=9))
        == "🔴 <@&9>, Foo is now live! Playing: **Chess**"
    )
    assert render.start_text(state, EveryoneMention()).startswith("🔴 @everyone, ")
    assert render.start_text(state, HereMention()).startswith("🔴 @here, ")


def test_texts_without_game() -> None:
    state = live_state(playing=None)

    assert render.live_text(state) == "🔴 Foo is currently streaming!"
    assert render.start_text(state, HereMention()) == "🔴 @here, Foo is now live!"
