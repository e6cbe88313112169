"""
Test factories: an in-memory remote store, a faulting key-value store
and builders for transactions and drafts.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from finance_tracker.models import (
    NewTransaction,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from finance_tracker.services.cache import KeyValueStore, LocalStorageFault
from finance_tracker.services.storage import (
    NotFoundError,
    RemoteUnavailableError,
    TransactionStoreInterface,
)


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


class FakeRemoteStore(TransactionStoreInterface):
    """
    In-memory remote store.

    Set ``fail_on`` to a set of operation names ("fetch_all", "insert",
    "update", "delete") to make them raise RemoteUnavailableError.
    """

    def __init__(self, rows: Optional[list[Transaction]] = None):
        self.rows: dict[str, Transaction] = {t.id: t for t in rows or []}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise RemoteUnavailableError(f"{operation} unavailable")

    async def fetch_all(self) -> list[Transaction]:
        self._enter("fetch_all")
        return sorted(self.rows.values(), key=lambda t: t.date, reverse=True)

    async def insert(self, transaction: NewTransaction) -> Transaction:
        self._enter("insert")
        stored = transaction.with_id(str(uuid4()))
        self.rows[stored.id] = stored
        return stored

    async def update(self, transaction: Transaction) -> Transaction:
        self._enter("update")
        if transaction.id not in self.rows:
            raise NotFoundError(f"Transaction not found: {transaction.id}")
        self.rows[transaction.id] = transaction
        return transaction

    async def delete(self, transaction_id: str) -> bool:
        self._enter("delete")
        return self.rows.pop(transaction_id, None) is not None


class FailingKeyValueStore(KeyValueStore):
    """Key-value store whose every operation faults."""

    def get(self, key: str) -> Optional[str]:
        raise LocalStorageFault("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise LocalStorageFault("disk full")

    def remove(self, key: str) -> None:
        raise LocalStorageFault("read-only filesystem")


def make_new(
    description: str = "Groceries",
    amount: str = "42.50",
    transaction_type: TransactionType = TransactionType.EXPENSE,
    category: str = "Food",
    on: date = date(2024, 1, 1),
    is_recurring: bool = False,
) -> NewTransaction:
    return NewTransaction(
        description=description,
        amount=Decimal(amount),
        type=transaction_type,
        category=category,
        date=on,
        is_recurring=is_recurring,
    )


def make_transaction(transaction_id: str, **kwargs) -> Transaction:
    return make_new(**kwargs).with_id(transaction_id)


def make_draft(**overrides) -> TransactionDraft:
    values = {
        "description": "Rent",
        "amount": Decimal("1200"),
        "type": TransactionType.EXPENSE,
        "category": "Housing",
        "reference_month": 1,
        "reference_year": 2024,
        "is_recurring": False,
    }
    values.update(overrides)
    return TransactionDraft(**values)


class SlowRemoteStore(FakeRemoteStore):
    """In-memory remote store whose inserts take a little while."""

    def __init__(self, delay: float = 0.05, **kwargs):
        super().__init__(**kwargs)
        self.delay = delay

    async def insert(self, transaction: NewTransaction) -> Transaction:
        await asyncio.sleep(self.delay)
        return await super().insert(transaction)
