"""Tests for the read-only query views."""

from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.models import TransactionType
from finance_tracker.queries import (
    month_bounds,
    project_month,
    recurring_transactions,
    summarize_balance,
    transactions_by_month,
)
from tests.factories import make_transaction


def income(transaction_id, amount, on):
    return make_transaction(
        transaction_id,
        amount=amount,
        transaction_type=TransactionType.INCOME,
        category="Salary",
        on=on,
    )


def expense(transaction_id, amount, on, is_recurring=False):
    return make_transaction(transaction_id, amount=amount, on=on, is_recurring=is_recurring)


class TestMonthBounds:

    def test_regular_month(self):
        assert month_bounds(2024, 4) == (date(2024, 4, 1), date(2024, 4, 30))

    def test_leap_february(self):
        assert month_bounds(2024, 2)[1] == date(2024, 2, 29)
        assert month_bounds(2023, 2)[1] == date(2023, 2, 28)

    @pytest.mark.parametrize("month", [0, 13])
    def test_out_of_range_month(self, month):
        with pytest.raises(ValueError):
            month_bounds(2024, month)


class TestTransactionsByMonth:

    def test_includes_both_boundaries(self):
        transactions = [
            expense("a", "1", date(2024, 1, 15)),
            expense("b", "1", date(2024, 1, 31)),
            expense("c", "1", date(2024, 2, 1)),
            expense("d", "1", date(2024, 1, 1)),
            expense("e", "1", date(2023, 12, 31)),
        ]
        assert [t.id for t in transactions_by_month(transactions, 2024, 1)] == ["a", "b", "d"]

    def test_same_month_other_year_excluded(self):
        transactions = [expense("a", "1", date(2023, 1, 10))]
        assert transactions_by_month(transactions, 2024, 1) == []

    def test_keeps_input_order(self):
        transactions = [expense("z", "1", date(2024, 1, 2)), expense("y", "1", date(2024, 1, 20))]
        assert [t.id for t in transactions_by_month(transactions, 2024, 1)] == ["z", "y"]


class TestRecurring:

    def test_filters_recurring_only(self):
        transactions = [
            expense("a", "10", date(2024, 1, 1), is_recurring=True),
            expense("b", "10", date(2024, 1, 2)),
        ]
        assert [t.id for t in recurring_transactions(transactions)] == ["a"]


class TestBalanceSummary:

    def test_totals(self):
        summary = summarize_balance([
            income("i1", "3000", date(2024, 1, 1)),
            expense("e1", "1200", date(2024, 1, 1)),
            expense("e2", "45.55", date(2024, 1, 3)),
        ])
        assert summary.income == Decimal("3000")
        assert summary.expenses == Decimal("1245.55")
        assert summary.balance == Decimal("1754.45")
        assert summary.transaction_count == 3

    def test_empty(self):
        summary = summarize_balance([])
        assert summary.balance == Decimal("0")
        assert summary.transaction_count == 0


class TestMonthProjection:

    def test_other_month_has_no_projection(self):
        transactions = [income("i1", "1000", date(2024, 1, 1))]
        assert project_month(transactions, 2024, 2, today=date(2024, 1, 10)) is None

    def test_projects_daily_average_over_remaining_days(self):
        transactions = [
            income("i1", "1000", date(2024, 1, 1)),
            expense("e1", "200", date(2024, 1, 5)),
            # After today, left out of the averages
            expense("e2", "50", date(2024, 1, 20)),
            expense("e3", "999", date(2023, 12, 31)),
        ]

        projection = project_month(transactions, 2024, 1, today=date(2024, 1, 10))

        assert projection.current_day == 10
        assert projection.days_in_month == 31
        assert projection.days_remaining == 21
        assert projection.current_income == Decimal("1000")
        assert projection.current_expenses == Decimal("200")
        assert projection.projected_income == Decimal("3100")
        assert projection.projected_expenses == Decimal("620")
        assert projection.projected_balance == Decimal("2480")

    def test_last_day_projects_current_totals(self):
        transactions = [expense("e1", "300", date(2024, 4, 2))]
        projection = project_month(transactions, 2024, 4, today=date(2024, 4, 30))
        assert projection.days_remaining == 0
        assert projection.projected_expenses == Decimal("300")
