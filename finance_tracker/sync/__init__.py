"""Synchronization package: the online/offline state machine and its manager."""

from finance_tracker.sync.state import (
    InvalidTransitionError,
    RemoteErrorKind,
    RemoteOutcome,
    SyncEvent,
    SyncState,
    classify_error,
    next_state,
)
from finance_tracker.sync.manager import (
    SyncManager,
    SyncNotStartedError,
    create_sync_manager,
)
from finance_tracker.sync.runner import EventLoopThread

__all__ = [
    "InvalidTransitionError",
    "RemoteErrorKind",
    "RemoteOutcome",
    "SyncEvent",
    "SyncState",
    "classify_error",
    "next_state",
    "SyncManager",
    "SyncNotStartedError",
    "create_sync_manager",
    "EventLoopThread",
]
