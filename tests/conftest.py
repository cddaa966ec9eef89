from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from twitch_live.application.error import NotificationDeliveryError
from twitch_live.domain.models import EmbedPayload, Mention, StreamSnapshot

STARTED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide minimal environment variables expected by Settings."""
    monkeypatch.setenv("BOT_TOKEN", "token")
    monkeypatch.setenv("TWITCH_USERNAME", "foo")
    monkeypatch.setenv("TWITCH_CID", "cid")
    monkeypatch.setenv("TWITCH_SECRET", "secret")
    monkeypatch.setenv("SERVER_ID", "111")
    monkeypatch.setenv("STREAMING_CHANNEL_ID", "922337203685477580")
    monkeypatch.setenv("PING_ROLE", "everyone")


@pytest.fixture
def mock_transport() -> Callable[
    [Callable[[httpx.Request], httpx.Response]], httpx.MockTransport
]:
    """Wrap a request handler into an httpx.MockTransport."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        return httpx.MockTransport(handler)

    return factory


def make_snapshot(**overrides: Any) -> StreamSnapshot:
    data: dict[str, Any] = {
        "id": "42",
        "user_id": "7",
        "user_login": "foo",
        "user_name": "Foo",
        "game_id": "",
        "type": "live",
        "title": "Speedruns",
        "viewer_count": 10,
        "started_at": STARTED_AT.isoformat(),
        "language": "en",
        "thumbnail_url": "https://static-cdn.jtvnw.net/foo-{width}x{height}.jpg",
    }
    data.update(overrides)
    return StreamSnapshot.model_validate(data)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


class FakeTwitch:
    """Serve one scripted response per ``get_stream`` call.

    ``None`` means offline, an exception instance is raised.
    """

    def __init__(
        self,
        responses: list[StreamSnapshot | None | Exception],
        games: dict[str, str] | None = None,
    ) -> None:
        self._responses = list(responses)
        self.games = games or {}
        self.stream_calls = 0
        self.game_calls: list[str] = []
        self.refreshes = 0

    async def refresh_token(self, force: bool = False) -> bool:
        self.refreshes += 1
        return True

    async def get_stream(self, login: str) -> StreamSnapshot | None:
        self.stream_calls += 1
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_game_name(self, game_id: str) -> str | None:
        self.game_calls.append(game_id)
        return self.games.get(game_id)


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, EmbedPayload, Mention | None]] = []
        self.edits: list[tuple[int, str, EmbedPayload]] = []
        self.fail_send = 0
        self.fail_edit = 0

    async def send(
        self, content: str, embed: EmbedPayload, mention: Mention | None = None
    ) -> int:
        if self.fail_send:
            self.fail_send -= 1
            raise NotificationDeliveryError(message="send failed")
        self.sent.append((content, embed, mention))
        return len(self.sent)

    async def edit(self, handle: int, content: str, embed: EmbedPayload) -> None:
        if self.fail_edit:
            self.fail_edit -= 1
            raise NotificationDeliveryError(message="edit failed")
        self.edits.append((handle, content, embed))

    @property
    def calls(self) -> int:
        return len(self.sent) + len(self.edits)
