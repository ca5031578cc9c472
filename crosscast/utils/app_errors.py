"""Application error taxonomy.

Every error carries an ``errcode``, a human readable ``errmesg``, a short
``erresid`` for correlating log lines, and the ``caller_info`` of the site that
raised it.
"""

import inspect
from enum import Enum
from uuid import uuid4


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_TRANSITION = "E_INVALID_TRANSITION"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_SEARCH_FAILED = "E_SEARCH_FAILED"
    E_PERSISTENCE_UNAVAILABLE = "E_PERSISTENCE_UNAVAILABLE"
    E_PLAYER_NOT_FOUND = "E_PLAYER_NOT_FOUND"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Base application error."""

    default_errcode: AppErrorCode = AppErrorCode.E_INTERNAL_ERROR
    default_errmesg: str = "We are sorry, an error occurred."

    def __init__(
        self,
        errmesg: str | None = None,
        *,
        errcode: AppErrorCode | None = None,
    ) -> None:
        self.errcode = str(errcode or self.default_errcode)
        self.errmesg = errmesg or self.default_errmesg
        self.erresid = uuid4().hex[:10]

        caller_frame = inspect.stack()[1]
        module = inspect.getmodule(caller_frame.frame)
        module_name = (
            module.__name__
            if module and getattr(module, "__name__", None)
            else caller_frame.filename
        )
        self.caller_info = f"{module_name}:{caller_frame.function}:{caller_frame.lineno}"
        super().__init__(self.errmesg)

    def __str__(self) -> str:
        return f"{self.errcode}: {self.errmesg}"


class NotFoundError(AppError):
    """Search completed but produced no acceptable candidate."""

    default_errcode = AppErrorCode.E_NOT_FOUND
    default_errmesg = "No matching stream found"


class SearchError(AppError):
    """The search provider failed to fetch or parse results."""

    default_errcode = AppErrorCode.E_SEARCH_FAILED
    default_errmesg = "Search failed"


class PersistenceUnavailable(AppError):
    """The key-value store cannot be reached (e.g. host context torn down)."""

    default_errcode = AppErrorCode.E_PERSISTENCE_UNAVAILABLE
    default_errmesg = "Persistence unavailable"


class PlayerNotFoundError(AppError):
    """There is no player handle to send commands to."""

    default_errcode = AppErrorCode.E_PLAYER_NOT_FOUND
    default_errmesg = "Player not found"


class InvalidTransitionError(AppError):
    default_errcode = AppErrorCode.E_INVALID_TRANSITION
    default_errmesg = "Invalid state transition"
