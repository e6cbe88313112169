"""
Shared fixtures for Finance Tracker tests.

No real network: the remote store is an in-memory fake and the local cache
writes into pytest's tmp_path.
"""

from typing import Optional

import pytest

from finance_tracker.config import get_settings
from finance_tracker.models import Identity
from finance_tracker.services.cache import JsonFileKeyValueStore, LocalCacheStore
from finance_tracker.services.identity import StaticIdentityResolver
from finance_tracker.services.storage import reset_sheets_client
from finance_tracker.sync import SyncManager
from tests.factories import FakeRemoteStore


@pytest.fixture(autouse=True)
def isolate_process_state():
    """Fresh settings and remote client for every test."""
    get_settings.cache_clear()
    reset_sheets_client()
    yield
    get_settings.cache_clear()
    reset_sheets_client()


@pytest.fixture
def identity() -> Identity:
    return Identity(id="owner@example.iam.gserviceaccount.com")


@pytest.fixture
def cache(tmp_path) -> LocalCacheStore:
    return LocalCacheStore(JsonFileKeyValueStore(tmp_path / "cache"))


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def make_manager(cache, remote, identity):
    """Build a manager; pass signed_in=False for a session without identity."""
    def _make(signed_in: bool = True, store: Optional[FakeRemoteStore] = None) -> SyncManager:
        resolver = StaticIdentityResolver(identity if signed_in else None)
        return SyncManager(
            remote_store=store or remote,
            identity_resolver=resolver,
            cache=cache,
        )
    return _make
