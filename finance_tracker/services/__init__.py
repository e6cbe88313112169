"""Services package."""

from finance_tracker.services.cache import (
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalCacheStore,
    LocalStorageFault,
    create_local_cache,
)
from finance_tracker.services.identity import (
    IdentityResolver,
    ServiceAccountIdentityResolver,
    StaticIdentityResolver,
)
from finance_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    NotFoundError,
    RemoteUnavailableError,
    StorageError,
    TransactionStoreInterface,
    UnauthenticatedError,
    get_sheets_client,
    reset_sheets_client,
)

__all__ = [
    # Local cache
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalCacheStore",
    "LocalStorageFault",
    "create_local_cache",
    # Identity
    "IdentityResolver",
    "ServiceAccountIdentityResolver",
    "StaticIdentityResolver",
    # Remote storage
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "NotFoundError",
    "RemoteUnavailableError",
    "StorageError",
    "TransactionStoreInterface",
    "UnauthenticatedError",
    "get_sheets_client",
    "reset_sheets_client",
]
