from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from twitch_live.errors import AppError


@dataclass(frozen=True, slots=True)
class ApplicationError(AppError):
    """Base exception for application layer."""


@dataclass(frozen=True, slots=True)
class StreamLookupError(ApplicationError):
    """Raised when the stream status of *login* could not be fetched."""

    login: str
    message: str = field(init=False)
    code: str = field(init=False, default="APP_STREAM_LOOKUP_FAILED")
    context: dict[str, str] = field(init=False)

    def __post_init__(self) -> None:  # pragma: no cover - formatting helper
        object.__setattr__(
            self, "message", f"Can't fetch stream status for {self.login}"
        )
        object.__setattr__(self, "context", {"login": self.login})


@dataclass(frozen=True, slots=True, kw_only=True)
class NotificationDeliveryError(ApplicationError):
    message: str
    context: dict[str, Any] | None = None
    code: str = field(init=False, default="APP_NOTIFICATION_FAILED")


@dataclass(frozen=True, slots=True)
class TickError(ApplicationError):
    """Describes a watcher tick that ended with an unexpected exception."""

    login: str
    error: Exception
    message: str = field(init=False, default="Watcher tick failed")
    code: str = field(init=False, default="APP_WATCHER_TICK_FAILED")
    context: dict[str, object] = field(init=False)

    def __post_init__(self) -> None:  # pragma: no cover - formatting helper
        object.__setattr__(
            self, "context", {"login": self.login, "error": repr(self.error)}
        )
