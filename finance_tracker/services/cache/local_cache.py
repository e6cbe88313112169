"""
Local Offline Cache

The full transaction list is kept under a single namespaced key in a
small file-backed key-value store. Reads and writes always move the whole
collection; there are no partial updates.

DESIGN DECISION: the cache never raises to its callers. A missing or
corrupt value loads as an empty list and a bad row is skipped. A failed
write is reported as False. Faults are logged, and recorded as audit
events when the cache is given an AuditLogger. The in-memory collection
stays the source of truth for the running session.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from finance_tracker.audit import AuditLogger, get_logger
from finance_tracker.config import LocalCacheSettings, get_settings
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.transaction import Transaction


logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class LocalStorageFault(Exception):
    """Reading, writing or serializing the local cache failed."""
    pass


class KeyValueStore(ABC):
    """Durable string key-value storage on this device."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class JsonFileKeyValueStore(KeyValueStore):
    """
    One file per key inside a directory.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LocalStorageFault(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise LocalStorageFault(f"Failed to write {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise LocalStorageFault(f"Failed to remove {path}: {e}") from e


class LocalCacheStore:
    """
    Whole-collection cache of transactions under one key.

    The JSON layout keeps ``isRecurring`` and the local/remote id as-is, so
    a saved collection loads back identical. Rows that no longer validate
    are skipped one by one; the rest of the collection still loads.
    """

    _adapter = TypeAdapter(list[Transaction])
    _rows_adapter = TypeAdapter(list[dict[str, Any]])

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "finance-app-transactions",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = key
        self._audit = audit_logger

    @property
    def key(self) -> str:
        return self._key

    def _fault(self, operation: str, error: Exception) -> None:
        logger.error(f"cache_{operation}_failed", key=self._key, error=str(error))
        if self._audit is not None:
            self._audit.log(AuditEventBuilder.cache_fault(operation, self._key, str(error)))

    def load(self) -> list[Transaction]:
        """Load the cached collection; empty on absence or an unreadable value."""
        try:
            raw = self._store.get(self._key)
            if raw is None:
                return []
            rows = self._rows_adapter.validate_json(raw)
        except (LocalStorageFault, ValueError) as e:
            self._fault("load", e)
            return []

        transactions = []
        for row in rows:
            try:
                transactions.append(Transaction.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "cache_row_skipped",
                    key=self._key,
                    transaction_id=row.get("id"),
                    error=str(e),
                )
        return transactions

    def save(self, transactions: Iterable[Transaction]) -> bool:
        """Overwrite the cached collection. Returns False if the write failed."""
        try:
            payload = self._adapter.dump_json(list(transactions), by_alias=True)
            self._store.set(self._key, payload.decode("utf-8"))
            return True
        except (LocalStorageFault, ValueError) as e:
            self._fault("save", e)
            return False

    def clear(self) -> bool:
        """Remove the key entirely."""
        try:
            self._store.remove(self._key)
            return True
        except (LocalStorageFault, ValueError) as e:
            self._fault("clear", e)
            return False


def create_local_cache(
    settings: Optional[LocalCacheSettings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> LocalCacheStore:
    """Build the cache from settings (directory and key)."""
    settings = settings or get_settings().cache
    return LocalCacheStore(
        JsonFileKeyValueStore(settings.directory_path),
        key=settings.storage_key,
        audit_logger=audit_logger,
    )
