from __future__ import annotations

import itertools
import re

from loguru import logger

from twitch_live.application.error import NotificationDeliveryError
from twitch_live.application.ports import NotifierProtocol
from twitch_live.domain.models import EmbedPayload, Mention

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")


def _markdown_to_plain(text: str) -> str:
    return _BOLD_RE.sub(r"\1", text)


def render_plain(content: str, embed: EmbedPayload) -> str:
    lines = [
        content,
        f"  {embed.title} ({embed.url})",
        *(f"  {line}" for line in embed.description.splitlines()),
        f"  {embed.footer.text}",
    ]
    return _markdown_to_plain("\n".join(lines))


class ConsoleNotifier(NotifierProtocol):
    """Log stream messages instead of posting them; handles are plain ints."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    async def send(
        self, content: str, embed: EmbedPayload, mention: Mention | None = None
    ) -> int:
        handle = next(self._ids)
        self._log(f"[send #{handle}]", content, embed)
        return handle

    async def edit(self, handle: int, content: str, embed: EmbedPayload) -> None:
        self._log(f"[edit #{handle}]", content, embed)

    def _log(self, prefix: str, content: str, embed: EmbedPayload) -> None:
        try:
            plain = render_plain(content, embed)
            # Use info for human-visible notifications
            logger.info(f"{prefix} {plain}")
        except Exception as e:
            logger.opt(exception=e).exception("Console notify failed")
            raise NotificationDeliveryError(
                message="Console notification failed", context={"error": repr(e)}
            ) from e
