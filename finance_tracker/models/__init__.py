"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.transaction import (
    CATEGORIES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    LOCAL_ID_PREFIX,
    Identity,
    NewTransaction,
    Transaction,
    TransactionDraft,
    TransactionType,
    add_months,
    categories_for,
    generate_local_id,
    is_local_id,
)
from finance_tracker.models.summary import BalanceSummary, MonthProjection
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "CATEGORIES",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "LOCAL_ID_PREFIX",
    "Identity",
    "NewTransaction",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "add_months",
    "categories_for",
    "generate_local_id",
    "is_local_id",
    # Summary models
    "BalanceSummary",
    "MonthProjection",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
