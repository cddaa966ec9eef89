from __future__ import annotations

import traceback
from typing import Any, NoReturn

from loguru import logger

from twitch_live.errors import AppError


def _format_tail(exc: BaseException, *, limit: int = 6) -> str:
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return "".join(tb[-limit:])


def log_and_wrap(
    exc: BaseException,
    module_exc_cls: type[AppError],
    context: dict[str, Any] | None = None,
) -> NoReturn:
    """Log a short traceback of *exc* and re-raise it as *module_exc_cls*."""

    logger.opt(exception=exc).error("{}", _format_tail(exc))
    raise module_exc_cls(str(exc), context=context or {}) from exc
