"""
Query Views

Pure read projections over a transaction collection. Nothing here touches
storage or mutates its input; every call recomputes from what it is given.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.models.summary import BalanceSummary, MonthProjection
from finance_tracker.models.transaction import Transaction, TransactionType


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month (month is 1-12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def transactions_by_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """Transactions dated within the month, boundaries included."""
    start, end = month_bounds(year, month)
    return [t for t in transactions if start <= t.date <= end]


def recurring_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.is_recurring]


def _total(transactions: Iterable[Transaction], transaction_type: TransactionType) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        Decimal("0"),
    )


def summarize_balance(transactions: Iterable[Transaction]) -> BalanceSummary:
    """Income, expenses and their difference."""
    items = list(transactions)
    income = _total(items, TransactionType.INCOME)
    expenses = _total(items, TransactionType.EXPENSE)
    return BalanceSummary(
        income=income,
        expenses=expenses,
        balance=income - expenses,
        transaction_count=len(items),
    )


def project_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    today: Optional[date] = None,
) -> Optional[MonthProjection]:
    """
    Estimate where the month will end.

    Only defined for the month containing ``today``; returns None for any
    other month. Amounts dated after today are left out of the averages.
    """
    today = today or date.today()
    if (today.year, today.month) != (year, month):
        return None

    days_in_month = calendar.monthrange(year, month)[1]
    current_day = today.day
    days_remaining = days_in_month - current_day

    to_date = [t for t in transactions_by_month(transactions, year, month) if t.date <= today]
    current_income = _total(to_date, TransactionType.INCOME)
    current_expenses = _total(to_date, TransactionType.EXPENSE)

    projected_income = current_income + current_income / current_day * days_remaining
    projected_expenses = current_expenses + current_expenses / current_day * days_remaining

    return MonthProjection(
        current_day=current_day,
        days_in_month=days_in_month,
        days_remaining=days_remaining,
        current_income=current_income,
        current_expenses=current_expenses,
        projected_income=projected_income,
        projected_expenses=projected_expenses,
        projected_balance=projected_income - projected_expenses,
    )
