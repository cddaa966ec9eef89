from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from .models import StreamSnapshot


@dataclass(slots=True)
class SessionState:
    """Mutable record of the live period currently being announced.

    One instance lives for the whole process and is owned by the watcher.
    ``is_streaming`` and ``message`` are set and cleared together; the only
    gaps are between :meth:`mark_live` and storing the sent message, and after
    an end-of-stream edit that failed.
    """

    is_streaming: bool = False
    message: Any | None = None
    viewers: int = 0
    peak_viewers: int = 0
    playing: str | None = None
    title: str | None = None
    started_at: datetime | None = None
    thumbnail: str | None = None
    language: str | None = None
    username: str | None = None
    failed_end_attempts: int = 0

    def reset(self) -> None:
        default = SessionState()
        for f in fields(self):
            setattr(self, f.name, getattr(default, f.name))

    def mark_live(self) -> None:
        # must be set before the start message is sent
        self.is_streaming = True

    def apply(self, snapshot: StreamSnapshot, game_name: str | None) -> None:
        self.title = snapshot.title
        self.started_at = snapshot.started_at
        self.viewers = snapshot.viewer_count
        self.peak_viewers = max(self.peak_viewers, snapshot.viewer_count)
        self.language = snapshot.language
        self.thumbnail = snapshot.thumbnail()
        self.username = snapshot.user_name
        self.playing = game_name or None
