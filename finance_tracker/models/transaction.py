"""
Core Data Models for Finance Tracker

These models define the schemas for every transaction flowing through the
system, whether it came from the remote store, the local cache or a form.
They are designed to:
1. Enforce amount and category rules at runtime
2. Serialize identically for the cache and the remote rows
3. Keep the local/remote id distinction recoverable from the id alone

DESIGN DECISION: A transaction id is either remote (opaque, assigned by the
remote store) or local (prefixed with ``local_``). Nothing else records where
a row came from.
"""

import datetime as dt
import time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


LOCAL_ID_PREFIX = "local_"


# =============================================================================
# ENUMS & CATEGORY TABLE
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


INCOME_CATEGORIES: tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Investments",
    "Sales",
    "Other",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food",
    "Transport",
    "Housing",
    "Health",
    "Education",
    "Leisure",
    "Shopping",
    "Other",
)

CATEGORIES: dict[TransactionType, tuple[str, ...]] = {
    TransactionType.INCOME: INCOME_CATEGORIES,
    TransactionType.EXPENSE: EXPENSE_CATEGORIES,
}


def categories_for(transaction_type: TransactionType) -> tuple[str, ...]:
    """Categories a user may pick for the given type."""
    return CATEGORIES[TransactionType(transaction_type)]


def generate_local_id() -> str:
    """
    Create an id for a row that has no remote counterpart.

    Format: ``local_<epoch-millis>_<8 hex chars>``.
    """
    return f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}_{uuid4().hex[:8]}"


def is_local_id(transaction_id: str) -> bool:
    return transaction_id.startswith(LOCAL_ID_PREFIX)


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Shift a (year, month 1-12) pair by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _coerce_date(value: Any) -> Any:
    """Accept datetimes and ISO datetime strings, keeping only the date."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionFields(BaseModel):
    """
    Fields shared by every transaction shape.

    ``is_recurring`` is serialized as ``isRecurring`` when dumped by alias,
    which is the layout of the local cache.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the money was for"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, description="Positive amount; direction comes from type")
    ]
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category, drawn from the table for the type"
    )
    date: dt.date = Field(
        ...,
        description="Reference date (day 1 of the reference month on creation)"
    )
    is_recurring: bool = Field(
        default=False,
        alias="isRecurring",
        description="Created as part of a 12-month series"
    )

    @field_validator("date", mode="before")
    @classmethod
    def truncate_datetime(cls, v: Any) -> Any:
        return _coerce_date(v)

    @model_validator(mode="after")
    def validate_category(self) -> "TransactionFields":
        """Category must belong to the table for the transaction type."""
        allowed = categories_for(self.type)
        if self.category not in allowed:
            raise ValueError(
                f"Category '{self.category}' is not valid for {self.type.value}. "
                f"Allowed: {', '.join(allowed)}"
            )
        return self


class NewTransaction(TransactionFields):
    """A transaction that has not been given an id yet."""

    def with_id(self, transaction_id: str) -> "Transaction":
        return Transaction(id=transaction_id, **self.model_dump())


class Transaction(TransactionFields):
    """
    A stored transaction.

    The id decides which store is authoritative for updating or
    deleting it: local ids live only on this device.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Remote id, or a local_ prefixed id for offline rows"
    )

    @property
    def is_local(self) -> bool:
        return is_local_id(self.id)

    def without_id(self) -> NewTransaction:
        return NewTransaction(**self.model_dump(exclude={"id"}))


class TransactionDraft(BaseModel):
    """
    What a user submits from the entry form.

    A draft names a reference month rather than a date. Expanding it
    yields one NewTransaction, or one per month for a recurring draft.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=100)
    amount: Annotated[Decimal, Field(gt=0)]
    type: TransactionType
    category: str = Field(..., min_length=1)
    reference_month: int = Field(..., ge=1, le=12, description="Month 1-12")
    reference_year: int = Field(..., ge=2020, le=2030)
    is_recurring: bool = False

    @model_validator(mode="after")
    def validate_category(self) -> "TransactionDraft":
        if self.category not in categories_for(self.type):
            raise ValueError(
                f"Category '{self.category}' is not valid for {self.type.value}"
            )
        return self

    def expand(self, recurring_months: int = 12) -> list[NewTransaction]:
        """
        Build the instances this draft creates.

        Recurring drafts produce ``recurring_months`` instances dated on
        day 1 of consecutive months, rolling over into the next year.
        """
        count = recurring_months if self.is_recurring else 1
        instances = []
        for offset in range(count):
            year, month = add_months(self.reference_year, self.reference_month, offset)
            instances.append(
                NewTransaction(
                    description=self.description,
                    amount=self.amount,
                    type=self.type,
                    category=self.category,
                    date=dt.date(year, month, 1),
                    is_recurring=self.is_recurring,
                )
            )
        return instances

    def as_edit_of(self, transaction_id: str) -> Transaction:
        """Apply this draft to one existing instance; never re-expands."""
        return self.expand(recurring_months=1)[0].with_id(transaction_id)

    @classmethod
    def from_transaction(cls, transaction: TransactionFields) -> "TransactionDraft":
        """Prefill a draft for editing an existing transaction."""
        return cls(
            description=transaction.description,
            amount=transaction.amount,
            type=transaction.type,
            category=transaction.category,
            reference_month=transaction.date.month,
            reference_year=transaction.date.year,
            is_recurring=transaction.is_recurring,
        )


# =============================================================================
# IDENTITY
# =============================================================================

class Identity(BaseModel):
    """The principal remote operations are scoped to."""

    id: str = Field(..., min_length=1)
    email: Optional[str] = None
