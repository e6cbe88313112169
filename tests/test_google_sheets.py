"""Tests for the Google Sheets remote store (worksheet mocked)."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import gspread
import pytest

from finance_tracker.models import Identity
from finance_tracker.services.identity import StaticIdentityResolver
from finance_tracker.services.storage import (
    TRANSACTION_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    NotFoundError,
    RemoteUnavailableError,
    UnauthenticatedError,
    get_sheets_client,
    reset_sheets_client,
)
from tests.factories import make_new, make_transaction, run


OWNER = "owner@example.iam.gserviceaccount.com"
OTHER = "someone-else@example.iam.gserviceaccount.com"


def row(transaction_id, user_id=OWNER, on="2024-01-01", amount="10.00", recurring="False"):
    return [
        transaction_id,
        user_id,
        "Bus pass",
        amount,
        "expense",
        "Transport",
        on,
        recurring,
        "2024-01-01T10:00:00+00:00",
        "2024-01-01T10:00:00+00:00",
    ]


@pytest.fixture
def sheet():
    worksheet = MagicMock()
    worksheet.get_all_values.return_value = [TRANSACTION_COLUMNS]
    return worksheet


@pytest.fixture
def store(sheet):
    client = MagicMock(spec=GoogleSheetsClient)
    client.get_transactions_sheet.return_value = sheet
    return GoogleSheetsTransactionStore(StaticIdentityResolver(Identity(id=OWNER)), client)


class TestFetchAll:

    def test_returns_only_owned_rows_newest_first(self, store, sheet):
        sheet.get_all_values.return_value = [
            TRANSACTION_COLUMNS,
            row("a", on="2024-01-01"),
            row("b", user_id=OTHER, on="2024-03-01"),
            row("c", on="2024-02-01", recurring="True"),
        ]

        transactions = run(store.fetch_all())

        assert [t.id for t in transactions] == ["c", "a"]
        assert transactions[0].is_recurring is True
        assert transactions[0].date == date(2024, 2, 1)
        assert transactions[1].amount == Decimal("10.00")

    def test_skips_malformed_rows(self, store, sheet):
        sheet.get_all_values.return_value = [
            TRANSACTION_COLUMNS,
            row("good"),
            row("bad-amount", amount="not a number"),
            [],
            ["", OWNER],
        ]
        assert [t.id for t in run(store.fetch_all())] == ["good"]

    def test_backend_failure_is_remote_unavailable(self, store, sheet):
        sheet.get_all_values.side_effect = gspread.exceptions.GSpreadException("quota")
        with pytest.raises(RemoteUnavailableError):
            run(store.fetch_all())


class TestInsert:

    def test_appends_row_with_remote_id(self, store, sheet):
        new = make_new(is_recurring=True)

        stored = run(store.insert(new))

        assert stored.id
        assert not stored.is_local
        assert stored.without_id() == new
        appended = sheet.append_row.call_args.args[0]
        assert appended[0] == stored.id
        assert appended[1] == OWNER
        assert appended[2:8] == ["Groceries", "42.50", "expense", "Food", "2024-01-01", "True"]
        assert sheet.append_row.call_args.kwargs == {"value_input_option": "RAW"}

    def test_failure_is_remote_unavailable(self, store, sheet):
        sheet.append_row.side_effect = ConnectionResetError("reset by peer")
        with pytest.raises(RemoteUnavailableError):
            run(store.insert(make_new()))


class TestUpdate:

    def test_rewrites_matching_row(self, store, sheet):
        sheet.get_all_values.return_value = [TRANSACTION_COLUMNS, row("x"), row("t1")]
        updated = make_transaction("t1", description="Monthly pass", amount="55")

        assert run(store.update(updated)) == updated

        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "A3:J3"
        new_row = kwargs["values"][0]
        assert new_row[:4] == ["t1", OWNER, "Monthly pass", "55"]
        # created_at is preserved
        assert new_row[8] == "2024-01-01T10:00:00+00:00"

    def test_missing_row_is_not_found(self, store, sheet):
        sheet.get_all_values.return_value = [TRANSACTION_COLUMNS, row("x")]
        with pytest.raises(NotFoundError):
            run(store.update(make_transaction("t1")))

    def test_row_of_other_owner_is_not_found(self, store, sheet):
        sheet.get_all_values.return_value = [TRANSACTION_COLUMNS, row("t1", user_id=OTHER)]
        with pytest.raises(NotFoundError):
            run(store.update(make_transaction("t1")))
        sheet.update.assert_not_called()


class TestDelete:

    def test_deletes_matching_row(self, store, sheet):
        sheet.get_all_values.return_value = [TRANSACTION_COLUMNS, row("a"), row("b")]
        assert run(store.delete("b")) is True
        sheet.delete_rows.assert_called_once_with(3)

    def test_absent_row_is_not_an_error(self, store, sheet):
        assert run(store.delete("missing")) is False
        sheet.delete_rows.assert_not_called()

    def test_never_deletes_other_owners_rows(self, store, sheet):
        sheet.get_all_values.return_value = [TRANSACTION_COLUMNS, row("a", user_id=OTHER)]
        assert run(store.delete("a")) is False


class TestAuthentication:

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.fetch_all(),
            lambda s: s.insert(make_new()),
            lambda s: s.update(make_transaction("t1")),
            lambda s: s.delete("t1"),
        ],
    )
    def test_every_operation_requires_identity(self, sheet, call):
        client = MagicMock(spec=GoogleSheetsClient)
        client.get_transactions_sheet.return_value = sheet
        store = GoogleSheetsTransactionStore(StaticIdentityResolver(None), client)

        with pytest.raises(UnauthenticatedError):
            run(call(store))
        client.get_transactions_sheet.assert_not_called()


class TestSharedClient:

    def test_client_is_created_once(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "/nonexistent/creds.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")
        with pytest.warns(UserWarning):
            first = get_sheets_client()
        assert get_sheets_client() is first

    def test_reset_builds_a_new_client(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "/nonexistent/creds.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")
        with pytest.warns(UserWarning):
            first = get_sheets_client()
        reset_sheets_client()
        with pytest.warns(UserWarning):
            second = get_sheets_client()
        assert second is not first

    def test_missing_credentials_file_is_remote_unavailable(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "/nonexistent/creds.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")
        with pytest.warns(UserWarning):
            client = GoogleSheetsClient()
        with pytest.raises(RemoteUnavailableError):
            client.connect()

    def test_creates_worksheet_with_headers_when_missing(self):
        settings = MagicMock(transactions_sheet_name="Transactions")
        client = GoogleSheetsClient(settings=settings)
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("Transactions")
        with patch.object(client, "get_spreadsheet", return_value=spreadsheet):
            sheet = client.get_transactions_sheet()

        spreadsheet.add_worksheet.assert_called_once()
        sheet.append_row.assert_called_once_with(TRANSACTION_COLUMNS)
