"""Query views package."""

from finance_tracker.queries.views import (
    month_bounds,
    project_month,
    recurring_transactions,
    summarize_balance,
    transactions_by_month,
)

__all__ = [
    "month_bounds",
    "project_month",
    "recurring_transactions",
    "summarize_balance",
    "transactions_by_month",
]
