from __future__ import annotations

from typing import Any

import httpx
from aiolimiter import AsyncLimiter
from loguru import logger

from twitch_live.application.error import StreamLookupError
from twitch_live.application.ports import TwitchClientProtocol
from twitch_live.domain.models import StreamSnapshot, TwitchAppCreds
from twitch_live.infrastructure.error import TwitchAuthError

TWITCH_API = "https://api.twitch.tv"
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"


class TwitchClient(TwitchClientProtocol):
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 10.0,
        async_limiter: AsyncLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        if not self.client_id or not self.client_secret:
            raise TwitchAuthError()
        self._http = httpx.AsyncClient(
            base_url=TWITCH_API, timeout=timeout, transport=transport
        )
        self._token: str | None = None
        self._limiter = async_limiter or AsyncLimiter(10, 10)

    @classmethod
    def from_creds(cls, creds: TwitchAppCreds, **kwargs: Any) -> "TwitchClient":
        return cls(creds.client_id, creds.client_secret, **kwargs)

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def get_stream(self, login: str) -> StreamSnapshot | None:
        """Return the live stream of *login*, or ``None`` when offline.

        Raises :class:`StreamLookupError` when the request itself failed, so
        callers can tell an offline channel from an unreachable API.
        """

        data = await self.fetch("/helix/streams", params={"user_login": login})
        if data is None:
            raise StreamLookupError(login=login)
        items = data.get("data") or []
        if not items:
            return None
        return StreamSnapshot.model_validate(items[0])

    async def get_game_name(self, game_id: str) -> str | None:
        data = await self.fetch("/helix/games", params={"id": game_id})
        if data is None:
            return None
        items = data.get("data") or []
        if not items:
            logger.warning(f"Twitch knows no game with id {game_id}")
            return None
        return items[0].get("name") or None

    async def fetch(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """GET *path* from Helix; failures are logged and yield ``None``.

        A 401 forces one token refresh followed by exactly one retry.
        """

        if not await self.refresh_token():
            return None
        try:
            r = await self._get(path, params)
            if r.status_code == 401:
                logger.warning("Twitch 401: refreshing token and retrying once…")
                if not await self.refresh_token(force=True):
                    return None
                r = await self._get(path, params)
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.opt(exception=e).error(f"Couldn't GET {path}: {e!r}")
            return None

    async def refresh_token(self, force: bool = False) -> bool:
        """Run the client-credentials grant unless a token is already held.

        Returns whether a token is held afterwards.
        """

        if self._token and not force:
            return True
        self._token = None
        logger.info("Refreshing Twitch app token…")
        try:
            r = await self._http.post(
                TWITCH_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
            r.raise_for_status()
            self._token = r.json()["access_token"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.opt(exception=e).error(f"Couldn't get Twitch app token: {e!r}")
            return False
        logger.info("Received Twitch app token")
        return True

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None) -> httpx.Response:
        async with self._limiter:
            return await self._http.get(
                path, params=params, headers=self._auth_headers()
            )

    def _auth_headers(self) -> dict[str, str]:
        assert self._token
        return {
            "Client-Id": self.client_id,
            "Authorization": f"Bearer {self._token}",
        }
