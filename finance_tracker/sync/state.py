"""
Sync State Machine

The synchronization manager is always in one of three states. Transitions
are a pure function of the current state and what just happened, so the
policy can be tested without any storage at all.

    LOADING --startup_fetched--> ONLINE
    LOADING --startup_failed / no_identity--> OFFLINE
    ONLINE  --remote_succeeded--> ONLINE
    ONLINE  --remote_failed--> OFFLINE
    ONLINE / OFFLINE --reconnect_succeeded--> ONLINE
    ONLINE / OFFLINE --reconnect_failed--> OFFLINE

There is no automatic OFFLINE -> ONLINE path; only an explicit reconnect
promotes the session again.
"""

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from finance_tracker.services.storage.interface import (
    NotFoundError,
    UnauthenticatedError,
)


T = TypeVar("T")


class SyncState(str, Enum):
    LOADING = "loading"
    ONLINE = "online"
    OFFLINE = "offline"


class SyncEvent(str, Enum):
    STARTUP_FETCHED = "startup_fetched"
    STARTUP_FAILED = "startup_failed"
    NO_IDENTITY = "no_identity"
    REMOTE_SUCCEEDED = "remote_succeeded"
    REMOTE_FAILED = "remote_failed"
    RECONNECT_SUCCEEDED = "reconnect_succeeded"
    RECONNECT_FAILED = "reconnect_failed"


class InvalidTransitionError(Exception):
    """An event arrived in a state that cannot handle it."""
    pass


_TRANSITIONS: dict[tuple[SyncState, SyncEvent], SyncState] = {
    (SyncState.LOADING, SyncEvent.STARTUP_FETCHED): SyncState.ONLINE,
    (SyncState.LOADING, SyncEvent.STARTUP_FAILED): SyncState.OFFLINE,
    (SyncState.LOADING, SyncEvent.NO_IDENTITY): SyncState.OFFLINE,
    (SyncState.ONLINE, SyncEvent.REMOTE_SUCCEEDED): SyncState.ONLINE,
    (SyncState.ONLINE, SyncEvent.REMOTE_FAILED): SyncState.OFFLINE,
    (SyncState.ONLINE, SyncEvent.RECONNECT_SUCCEEDED): SyncState.ONLINE,
    (SyncState.ONLINE, SyncEvent.RECONNECT_FAILED): SyncState.OFFLINE,
    (SyncState.OFFLINE, SyncEvent.RECONNECT_SUCCEEDED): SyncState.ONLINE,
    (SyncState.OFFLINE, SyncEvent.RECONNECT_FAILED): SyncState.OFFLINE,
}


def next_state(current: SyncState, event: SyncEvent) -> SyncState:
    """Return the state that follows ``event`` in ``current``."""
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Event {event.value} is not valid in state {current.value}"
        ) from None


class RemoteErrorKind(str, Enum):
    """Why a remote call failed. All kinds are handled the same way."""
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


def classify_error(error: BaseException) -> RemoteErrorKind:
    if isinstance(error, UnauthenticatedError):
        return RemoteErrorKind.UNAUTHENTICATED
    if isinstance(error, NotFoundError):
        return RemoteErrorKind.NOT_FOUND
    return RemoteErrorKind.UNAVAILABLE


class RemoteOutcome(BaseModel, Generic[T]):
    """Result of one remote call: either a value or an error kind."""

    ok: bool
    value: Optional[T] = None
    error_kind: Optional[RemoteErrorKind] = None
    error_message: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "RemoteOutcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "RemoteOutcome":
        return cls(
            ok=False,
            error_kind=classify_error(error),
            error_message=str(error) or error.__class__.__name__,
        )

    @property
    def event(self) -> SyncEvent:
        return SyncEvent.REMOTE_SUCCEEDED if self.ok else SyncEvent.REMOTE_FAILED
