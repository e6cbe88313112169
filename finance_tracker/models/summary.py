"""Read-side models returned by the query views."""

from decimal import Decimal

from pydantic import BaseModel, Field


class BalanceSummary(BaseModel):
    """Totals over a set of transactions."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    transaction_count: int = 0


class MonthProjection(BaseModel):
    """
    End-of-month estimate for the current month.

    Projected figures extend the daily average of everything dated up to
    today over the days left in the month.
    """

    current_day: int = Field(..., ge=1, le=31)
    days_in_month: int = Field(..., ge=28, le=31)
    days_remaining: int = Field(..., ge=0)
    current_income: Decimal
    current_expenses: Decimal
    projected_income: Decimal
    projected_expenses: Decimal
    projected_balance: Decimal
