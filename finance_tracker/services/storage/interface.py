"""
Abstract Remote Store Interface

DESIGN DECISION: The synchronization manager only talks to this interface.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use fakes in tests
3. Keep the online/offline policy decoupled from the backend

Every operation is scoped to the current identity. Callers must be ready
for any of the exceptions below; the synchronization manager treats them
all the same way.
"""

from abc import ABC, abstractmethod

from finance_tracker.models.transaction import NewTransaction, Transaction


class TransactionStoreInterface(ABC):
    """
    Abstract interface for the authoritative remote transaction store.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def fetch_all(self) -> list[Transaction]:
        """
        Fetch every transaction owned by the current identity.

        Returns:
            Transactions ordered by date, newest first

        Raises:
            UnauthenticatedError: If there is no current identity
            RemoteUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def insert(self, transaction: NewTransaction) -> Transaction:
        """
        Persist a new transaction for the current identity.

        Returns:
            The stored transaction carrying its remote id

        Raises:
            UnauthenticatedError: If there is no current identity
            RemoteUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def update(self, transaction: Transaction) -> Transaction:
        """
        Persist changes to an existing transaction.

        Only a row matching both the id and the current identity is touched.

        Returns:
            The stored transaction after the update

        Raises:
            NotFoundError: If no matching row exists
            UnauthenticatedError: If there is no current identity
            RemoteUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: str) -> bool:
        """
        Delete a transaction by id.

        Idempotent: deleting an absent row is not an error.

        Returns:
            True if a row was removed, False if none matched

        Raises:
            UnauthenticatedError: If there is no current identity
            RemoteUnavailableError: If the backend cannot be reached
        """
        pass


class StorageError(Exception):
    """Base exception for remote storage operations."""
    pass


class UnauthenticatedError(StorageError):
    """A remote operation was attempted without an identity."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class RemoteUnavailableError(StorageError):
    """Could not reach the storage backend, or it failed."""
    pass
