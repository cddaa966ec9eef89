import pytest
from conftest import STARTED_AT, make_snapshot
from pydantic import TypeAdapter, ValidationError

from twitch_live.domain.models import (
    EveryoneMention,
    HereMention,
    Mention,
    RoleMention,
    TwitchAppCreds,
    parse_mention,
)
from twitch_live.domain.session import SessionState
from twitch_live.errors import ConfigError


@pytest.mark.parametrize(
    "token, expected",
    [
        ("everyone", EveryoneMention()),
        ("@everyone", EveryoneMention()),
        ("here", HereMention()),
        ("HERE", HereMention()),
        ("123456789012345678", RoleMention(role_id=123456789012345678)),
        ("<@&42>", RoleMention(role_id=42)),
        (" 42 ", RoleMention(role_id=42)),
    ],
)
def test_parse_mention(token: str, expected: Mention) -> None:
    assert parse_mention(token) == expected


@pytest.mark.parametrize("token", ["", "moderators", "<#42>", "12ab", "<@42>", "<@!42>"])
def test_parse_mention_rejects_garbage(token: str) -> None:
    with pytest.raises(ConfigError) as exc:
        parse_mention(token)
    assert exc.value.code == "CONFIG_INVALID"
    assert exc.value.context == {"ping_role": token}


def test_mention_render() -> None:
    assert EveryoneMention().render() == "@everyone"
    assert HereMention().render() == "@here"
    assert RoleMention(role_id=7).render() == "<@&7>"


def test_mention_is_tagged_union() -> None:
    adapter = TypeAdapter(Mention)
    assert adapter.validate_python({"kind": "role", "role_id": 3}) == RoleMention(role_id=3)
    assert adapter.validate_python({"kind": "here"}) == HereMention()


def test_snapshot_thumbnail_substitutes_size() -> None:
    snapshot = make_snapshot(thumbnail_url="https://cdn/x-{width}x{height}.jpg")
    assert snapshot.thumbnail() == "https://cdn/x-1280x720.jpg"
    assert snapshot.thumbnail(320, 180) == "https://cdn/x-320x180.jpg"


def test_snapshot_parses_twitch_timestamp() -> None:
    snapshot = make_snapshot(started_at="2024-01-01T12:00:00Z")
    assert snapshot.started_at == STARTED_AT


def test_snapshot_is_frozen() -> None:
    snapshot = make_snapshot()
    with pytest.raises(ValidationError):
        snapshot.title = "other"  # type: ignore[misc]


def test_creds_model() -> None:
    creds = TwitchAppCreds(client_id="a", client_secret="b")
    assert creds.client_id == "a"


def test_session_apply_and_reset() -> None:
    state = SessionState()
    state.apply(make_snapshot(viewer_count=30, language="de"), "Chess")
    state.apply(make_snapshot(viewer_count=12, title="later"), None)

    assert state.viewers == 12
    assert state.peak_viewers == 30
    assert state.title == "later"
    assert state.playing is None
    assert state.username == "Foo"
    assert state.started_at == STARTED_AT
    assert state.is_streaming is False

    state.mark_live()
    state.message = object()
    state.failed_end_attempts = 2
    state.reset()
    assert state == SessionState()


def test_session_apply_treats_empty_game_as_none() -> None:
    state = SessionState(playing="stale")
    state.apply(make_snapshot(), "")
    assert state.playing is None
