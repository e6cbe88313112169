"""
Remote Storage Package

Provides the abstract remote store interface and the Google Sheets
implementation. Designed to be swappable.
"""

from finance_tracker.services.storage.interface import (
    NotFoundError,
    RemoteUnavailableError,
    StorageError,
    TransactionStoreInterface,
    UnauthenticatedError,
)
from finance_tracker.services.storage.google_sheets import (
    TRANSACTION_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    get_sheets_client,
    reset_sheets_client,
)

__all__ = [
    # Interface
    "TransactionStoreInterface",
    # Exceptions
    "NotFoundError",
    "RemoteUnavailableError",
    "StorageError",
    "UnauthenticatedError",
    # Google Sheets implementation
    "TRANSACTION_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "get_sheets_client",
    "reset_sheets_client",
]
