"""
Google Sheets Remote Store

DESIGN DECISION: Google Sheets is the hosted row store because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (every CRUD call touches one row)
- Limited query capabilities (we filter by owner in Python)

Every row carries a user_id column and every operation is scoped by it.
created_at/updated_at are managed here and never surfaced to callers.
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import Retrying, stop_after_attempt, wait_exponential

from finance_tracker.audit import get_logger
from finance_tracker.config import GoogleSheetsSettings, get_settings
from finance_tracker.models.transaction import (
    Identity,
    NewTransaction,
    Transaction,
    TransactionFields,
)
from finance_tracker.services.identity import IdentityResolver
from finance_tracker.services.storage.interface import (
    NotFoundError,
    RemoteUnavailableError,
    StorageError,
    TransactionStoreInterface,
    UnauthenticatedError,
)


logger = get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "description",
    "amount",
    "type",
    "category",
    "date",
    "is_recurring",
    "created_at",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries opening the spreadsheet.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise RemoteUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise RemoteUnavailableError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet, retrying transient failures."""
        if self._spreadsheet is None:
            for attempt in Retrying(
                stop=stop_after_attempt(self._settings.connect_attempts),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                reraise=True,
            ):
                with attempt:
                    client = self.connect()
                    try:
                        self._spreadsheet = client.open_by_key(
                            self._settings.spreadsheet_id
                        )
                    except gspread.SpreadsheetNotFound as e:
                        raise RemoteUnavailableError(
                            f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                        ) from e
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet

    def close(self) -> None:
        self._client = None
        self._spreadsheet = None


_client_lock = threading.Lock()
_shared_client: Optional[GoogleSheetsClient] = None


def get_sheets_client() -> GoogleSheetsClient:
    """
    Get the process-wide Google Sheets client.

    The client is created on first use and reused afterwards.
    """
    global _shared_client
    with _client_lock:
        if _shared_client is None:
            _shared_client = GoogleSheetsClient()
        return _shared_client


def reset_sheets_client() -> None:
    """Drop the process-wide client so the next call builds a fresh one."""
    global _shared_client
    with _client_lock:
        if _shared_client is not None:
            _shared_client.close()
        _shared_client = None


class GoogleSheetsTransactionStore(TransactionStoreInterface):
    """
    Google Sheets implementation of the remote transaction store.

    Transactions are stored one per row. Rows belonging to other
    identities are never read or touched.
    """

    def __init__(
        self,
        identity_resolver: IdentityResolver,
        client: Optional[GoogleSheetsClient] = None,
    ):
        self._identity_resolver = identity_resolver
        self._client = client

    @property
    def client(self) -> GoogleSheetsClient:
        return self._client or get_sheets_client()

    async def _require_identity(self) -> Identity:
        identity = await self._identity_resolver.current_identity()
        if identity is None:
            raise UnauthenticatedError("No authenticated identity for remote access")
        return identity

    def _transaction_to_row(
        self,
        transaction_id: str,
        user_id: str,
        transaction: TransactionFields,
        created_at: str,
        updated_at: str,
    ) -> list:
        """Convert a transaction to a spreadsheet row."""
        return [
            transaction_id,
            user_id,
            transaction.description,
            str(transaction.amount),
            transaction.type.value,
            transaction.category,
            transaction.date.isoformat(),
            str(transaction.is_recurring),
            created_at,
            updated_at,
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=safe_get(0),
            description=safe_get(2),
            amount=Decimal(safe_get(3)),
            type=safe_get(4),
            category=safe_get(5),
            date=safe_get(6),
            is_recurring=safe_get(7).lower() == "true",
        )

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _find_row(all_rows: list[list], transaction_id: str, user_id: str) -> Optional[int]:
        """1-based sheet row index of the owned row with this id."""
        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if len(row) > 1 and row[0] == transaction_id and row[1] == user_id:
                return idx
        return None

    async def fetch_all(self) -> list[Transaction]:
        """Fetch every row owned by the current identity, newest first."""
        identity = await self._require_identity()
        try:
            sheet = self.client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(f"Failed to fetch transactions: {e}") from e

        transactions = []
        for row in all_rows:
            if len(row) < 2 or not row[0] or row[1] != identity.id:
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except Exception as e:
                logger.warning("remote_row_skipped", row_id=row[0], error=str(e))
                continue

        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    async def insert(self, transaction: NewTransaction) -> Transaction:
        """Append a row with a freshly assigned remote id."""
        identity = await self._require_identity()
        transaction_id = str(uuid4())
        now = self._now()
        try:
            sheet = self.client.get_transactions_sheet()
            row = self._transaction_to_row(transaction_id, identity.id, transaction, now, now)
            sheet.append_row(row, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(f"Failed to insert transaction: {e}") from e

        return transaction.with_id(transaction_id)

    async def update(self, transaction: Transaction) -> Transaction:
        """Rewrite the owned row matching the transaction id."""
        identity = await self._require_identity()
        try:
            sheet = self.client.get_transactions_sheet()
            all_rows = sheet.get_all_values()

            idx = self._find_row(all_rows, transaction.id, identity.id)
            if idx is None:
                raise NotFoundError(f"Transaction not found: {transaction.id}")

            existing = all_rows[idx - 1]
            created_at = existing[8] if len(existing) > 8 and existing[8] else self._now()
            new_row = self._transaction_to_row(
                transaction.id, identity.id, transaction, created_at, self._now()
            )
            sheet.update(
                range_name=f"A{idx}:{rowcol_to_a1(idx, len(TRANSACTION_COLUMNS))}",
                values=[new_row],
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(f"Failed to update transaction: {e}") from e

        return transaction

    async def delete(self, transaction_id: str) -> bool:
        """Delete the owned row with this id, if any."""
        identity = await self._require_identity()
        try:
            sheet = self.client.get_transactions_sheet()
            all_rows = sheet.get_all_values()

            idx = self._find_row(all_rows, transaction_id, identity.id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(f"Failed to delete transaction: {e}") from e
