"""
Synchronization Manager

Owns the in-memory transaction collection and routes every mutation
through a remote-first, local-fallback policy:

- ONLINE: try the remote store first. If the call fails for any reason,
  finish the mutation locally and drop to OFFLINE.
- OFFLINE: mutate locally, never call the remote store.
- Always: after a mutation, write the whole collection to the local cache.

DESIGN DECISION: a single remote failure downgrades the whole session.
There is no per-call retry and no automatic way back; ``reconnect()`` is
the only path from OFFLINE to ONLINE.

Mutations are serialized with an asyncio.Lock, so at most one is in
flight at a time. Remote calls have no timeout: a hung call holds the lock
until it returns. The lock belongs to one event loop, so a manager shared
by several threads must be driven through a single EventLoopThread.
"""

import asyncio
from datetime import date
from typing import Awaitable, Callable, Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.summary import BalanceSummary, MonthProjection
from finance_tracker.models.transaction import (
    NewTransaction,
    Transaction,
    TransactionDraft,
    generate_local_id,
    is_local_id,
)
from finance_tracker.queries import (
    project_month,
    recurring_transactions,
    summarize_balance,
    transactions_by_month,
)
from finance_tracker.services.cache import LocalCacheStore, create_local_cache
from finance_tracker.services.identity import (
    IdentityResolver,
    ServiceAccountIdentityResolver,
)
from finance_tracker.services.storage import (
    GoogleSheetsTransactionStore,
    TransactionStoreInterface,
    UnauthenticatedError,
)
from finance_tracker.sync.state import (
    RemoteOutcome,
    SyncEvent,
    SyncState,
    next_state,
)


class SyncNotStartedError(RuntimeError):
    """A mutation was requested before start() finished."""
    pass


class SyncManager:
    """
    Single owner of the session's transaction collection.

    Callers get snapshots (tuples or new lists); only this class mutates
    the collection.
    """

    def __init__(
        self,
        remote_store: TransactionStoreInterface,
        identity_resolver: IdentityResolver,
        cache: LocalCacheStore,
        audit_logger: Optional[AuditLogger] = None,
        recurring_months: int = 12,
    ):
        self._remote = remote_store
        self._identity_resolver = identity_resolver
        self._cache = cache
        self._audit = audit_logger or AuditLogger()
        self._recurring_months = recurring_months

        self._state = SyncState.LOADING
        self._transactions: list[Transaction] = []
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state == SyncState.LOADING

    @property
    def is_online(self) -> bool:
        return self._state == SyncState.ONLINE

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Read-only snapshot of the collection, newest additions first."""
        return tuple(self._transactions)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def _transition(self, event: SyncEvent, reason: str) -> None:
        previous = self._state
        self._state = next_state(previous, event)
        if previous != self._state:
            self._audit.log(
                AuditEventBuilder.mode_changed(previous.value, self._state.value, reason)
            )

    def _require_started(self) -> None:
        if self._state == SyncState.LOADING:
            raise SyncNotStartedError("start() must complete before changing transactions")

    async def _call_remote(self, method: Callable[..., Awaitable], *args) -> RemoteOutcome:
        """Await a remote call and turn any failure into an outcome."""
        try:
            value = await method(*args)
        except Exception as e:
            return RemoteOutcome.failure(e)
        return RemoteOutcome.success(value)

    def _apply_outcome(
        self,
        outcome: RemoteOutcome,
        operation: str,
        transaction_id: Optional[str] = None,
    ) -> None:
        """Record a mutation's remote outcome and move the state machine."""
        if not outcome.ok:
            self._audit.log(
                AuditEventBuilder.remote_fallback(
                    operation=operation,
                    error_kind=outcome.error_kind.value,
                    error_message=outcome.error_message,
                    transaction_id=transaction_id,
                )
            )
        self._transition(outcome.event, reason=operation)

    def _mirror(self) -> None:
        """Write-through of the whole collection to the local cache."""
        self._cache.save(self._transactions)

    def _new_local_id(self) -> str:
        existing = {t.id for t in self._transactions}
        transaction_id = generate_local_id()
        while transaction_id in existing:
            transaction_id = generate_local_id()
        return transaction_id

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def start(self) -> SyncState:
        """
        Leave LOADING.

        With an identity, the remote collection is fetched and cached;
        without one, or if the fetch fails, the cached collection is used.
        Calling start() again once started is a no-op.
        """
        async with self._lock:
            if self._state != SyncState.LOADING:
                return self._state

            identity = await self._identity_resolver.current_identity()
            if identity is None:
                self._transactions = self._cache.load()
                self._transition(SyncEvent.NO_IDENTITY, reason="no identity")
            else:
                outcome = await self._call_remote(self._remote.fetch_all)
                if outcome.ok:
                    self._transactions = list(outcome.value)
                    self._mirror()
                    self._transition(SyncEvent.STARTUP_FETCHED, reason="fetch_all")
                else:
                    self._transactions = self._cache.load()
                    self._audit.log(
                        AuditEventBuilder.remote_fallback(
                            operation="fetch_all",
                            error_kind=outcome.error_kind.value,
                            error_message=outcome.error_message,
                        )
                    )
                    self._transition(SyncEvent.STARTUP_FAILED, reason="fetch_all")

            self._audit.log(
                AuditEventBuilder.sync_started(
                    state=self._state.value,
                    transaction_count=len(self._transactions),
                    has_identity=identity is not None,
                )
            )
            return self._state

    async def reconnect(self) -> SyncState:
        """
        Try to get back to ONLINE.

        On success the remote collection replaces the in-memory one, except
        that rows created offline (local ids) are kept on this device. They
        are not uploaded. On failure the collection is left untouched.
        """
        async with self._lock:
            self._require_started()

            identity = await self._identity_resolver.current_identity()
            if identity is None:
                outcome = RemoteOutcome.failure(
                    UnauthenticatedError("No authenticated identity for remote access")
                )
            else:
                outcome = await self._call_remote(self._remote.fetch_all)

            if outcome.ok:
                remote = list(outcome.value)
                remote_ids = {t.id for t in remote}
                local_only = [
                    t for t in self._transactions
                    if t.is_local and t.id not in remote_ids
                ]
                self._transactions = local_only + remote
                self._mirror()
                self._transition(SyncEvent.RECONNECT_SUCCEEDED, reason="reconnect")
            else:
                self._transition(SyncEvent.RECONNECT_FAILED, reason="reconnect")

            self._audit.log(AuditEventBuilder.reconnect_attempted(outcome.ok))
            return self._state

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def _commit_new(self, new: NewTransaction) -> Transaction:
        """Commit one instance: remote insert when online, else a local id."""
        transaction = None
        if self._state == SyncState.ONLINE:
            outcome = await self._call_remote(self._remote.insert, new)
            self._apply_outcome(outcome, "insert")
            if outcome.ok:
                transaction = outcome.value

        if transaction is None:
            transaction = new.with_id(self._new_local_id())

        self._transactions.insert(0, transaction)
        self._mirror()
        self._audit.log(
            AuditEventBuilder.transaction_added(transaction.id, local=transaction.is_local)
        )
        return transaction

    async def add_transaction(self, draft: TransactionDraft) -> list[Transaction]:
        """
        Add a submitted draft.

        A recurring draft expands into one instance per month; each
        instance is committed on its own, so a failure halfway through
        leaves the earlier instances remote and the rest local.
        """
        async with self._lock:
            self._require_started()
            return [
                await self._commit_new(instance)
                for instance in draft.expand(self._recurring_months)
            ]

    async def add_new_transaction(self, new: NewTransaction) -> Transaction:
        """Add a single already-dated transaction."""
        async with self._lock:
            self._require_started()
            return await self._commit_new(new)

    async def update_transaction(self, transaction: Transaction) -> Optional[Transaction]:
        """
        Replace one instance by id.

        Recurring siblings are never touched. Returns the stored version,
        or None if the id is not in the collection.
        """
        async with self._lock:
            self._require_started()

            stored = transaction
            remote_ok = False
            if self._state == SyncState.ONLINE and not transaction.is_local:
                outcome = await self._call_remote(self._remote.update, transaction)
                self._apply_outcome(outcome, "update", transaction.id)
                if outcome.ok:
                    stored = outcome.value
                    remote_ok = True

            replaced = False
            for idx, existing in enumerate(self._transactions):
                if existing.id == stored.id:
                    self._transactions[idx] = stored
                    replaced = True
                    break

            self._mirror()
            if replaced:
                self._audit.log(
                    AuditEventBuilder.transaction_updated(stored.id, local=not remote_ok)
                )
            return stored if replaced else None

    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove one instance by id.

        The row leaves the in-memory collection even if the remote delete
        fails. Returns whether a row was removed locally.
        """
        async with self._lock:
            self._require_started()

            if self._state == SyncState.ONLINE and not is_local_id(transaction_id):
                outcome = await self._call_remote(self._remote.delete, transaction_id)
                self._apply_outcome(outcome, "delete", transaction_id)

            remaining = [t for t in self._transactions if t.id != transaction_id]
            found = len(remaining) != len(self._transactions)
            self._transactions = remaining

            self._mirror()
            self._audit.log(AuditEventBuilder.transaction_deleted(transaction_id, found))
            return found

    async def clear_all_transactions(self) -> None:
        """
        Forget every transaction on this device.

        The cache key is removed outright. The remote store is not touched.
        """
        async with self._lock:
            self._require_started()
            count = len(self._transactions)
            self._transactions = []
            self._cache.clear()
            self._audit.log(AuditEventBuilder.transactions_cleared(count))

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def get_transactions_by_month(self, year: int, month: int) -> list[Transaction]:
        return transactions_by_month(self._transactions, year, month)

    def get_recurring_transactions(self) -> list[Transaction]:
        return recurring_transactions(self._transactions)

    def get_balance_summary(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> BalanceSummary:
        """Totals for one month, or for everything when no month is given."""
        if year is not None and month is not None:
            return summarize_balance(self.get_transactions_by_month(year, month))
        return summarize_balance(self._transactions)

    def get_month_projection(
        self,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> Optional[MonthProjection]:
        return project_month(self._transactions, year, month, today)


def create_sync_manager(settings: Optional[Settings] = None) -> SyncManager:
    """
    Factory wiring the manager to Google Sheets and the local cache.

    Nothing here touches the network; missing Google configuration only
    shows up later as "no identity" and an OFFLINE start.
    """
    settings = settings or get_settings()
    identity_resolver = ServiceAccountIdentityResolver()
    audit_logger = AuditLogger()
    return SyncManager(
        remote_store=GoogleSheetsTransactionStore(identity_resolver),
        identity_resolver=identity_resolver,
        cache=create_local_cache(settings.cache, audit_logger),
        audit_logger=audit_logger,
        recurring_months=settings.app.recurring_months,
    )
