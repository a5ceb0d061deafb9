"""
Core Data Models for Expense Tracker

These models define the strict schemas for every record in the system.
They are designed to:
1. Reject malformed input at construction time
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Construction is the ONLY validation boundary.
A pydantic ValidationError raised here means the record never reaches
the store. Aggregation code downstream assumes well-formed records.
"""

import datetime as dt
import re
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Expense categories.

    Declaration order matters: category totals are reported in this
    order and ties for the top category go to the earlier member.
    """
    FOOD = "food"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    RENT = "rent"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HEALTH = "health"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        return CATEGORY_DISPLAY[self][1]

    @classmethod
    def for_display(cls, value: str) -> "Category":
        """Resolve a stored value for display, falling back to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


CATEGORY_DISPLAY: dict[Category, tuple[str, str]] = {
    Category.FOOD: ("Food", "🍔"),
    Category.TRAVEL: ("Travel", "🚗"),
    Category.SHOPPING: ("Shopping", "🛍️"),
    Category.RENT: ("Rent", "🏠"),
    Category.ENTERTAINMENT: ("Entertainment", "🎬"),
    Category.UTILITIES: ("Utilities", "💡"),
    Category.HEALTH: ("Health", "❤️"),
    Category.OTHER: ("Other", "📌"),
}


class PaymentMethod(str, Enum):
    """How an expense was paid."""
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK = "bank"


# =============================================================================
# MONTH KEYS
# =============================================================================

def month_key(day: dt.date) -> str:
    """Return the YYYY-MM key of the month containing ``day``."""
    return f"{day.year:04d}-{day.month:02d}"


def is_month_key(value: str) -> bool:
    return bool(re.fullmatch(MONTH_KEY_PATTERN, value))


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseFields(BaseModel):
    """
    The user-editable part of an expense.

    This is what a form submits when creating an expense. The store
    adds id, owner and creation time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date
    category: Category
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount spent (positive)"
    )
    payment_method: PaymentMethod
    tag: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Optional free-text label"
    )

    @field_validator('tag')
    @classmethod
    def blank_tag_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class Expense(ExpenseFields):
    """
    A persisted expense.

    id and created_at are assigned by the store and never change.
    owner_id is fixed at creation.
    """

    id: UUID
    owner_id: UUID
    created_at: dt.datetime

    @property
    def month(self) -> str:
        return month_key(self.date)


class ExpenseUpdate(BaseModel):
    """
    A partial change to an expense.

    Only fields that were explicitly set are written. Identity fields
    (id, owner_id, created_at) are not part of this model and are
    rejected if supplied.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    date: Optional[dt.date] = None
    category: Optional[Category] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    payment_method: Optional[PaymentMethod] = None
    tag: Optional[str] = Field(default=None, max_length=100)

    @field_validator('tag')
    @classmethod
    def blank_tag_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode='after')
    def reject_cleared_required_fields(self) -> 'ExpenseUpdate':
        """Only the tag may be cleared; every other field is required."""
        for name in self.model_fields_set:
            if name != "tag" and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """The explicitly supplied fields."""
        return self.model_dump(exclude_unset=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


# =============================================================================
# BUDGETS
# =============================================================================

class MonthlyBudget(BaseModel):
    """
    A spending limit for one calendar month.

    At most one budget exists per (owner_id, month); saving again
    for the same month overwrites the amount.
    """

    owner_id: UUID
    month: str = Field(
        ...,
        pattern=MONTH_KEY_PATTERN,
        description="Month key in YYYY-MM format"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Budgeted amount (positive)"
    )
    id: Optional[UUID] = None
    created_at: Optional[dt.datetime] = None


# =============================================================================
# DEVICE-LOCAL RECORDS (pre sign-in)
# =============================================================================

class CachedExpense(ExpenseFields):
    """
    An expense saved on the device before the user signed in.

    The device cache was written with camelCase keys, so both
    ``paymentMethod`` and ``payment_method`` are accepted.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: UUID
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    created_at: Optional[dt.datetime] = Field(default=None, alias="createdAt")


class CachedBudget(BaseModel):
    """A monthly budget saved on the device before sign-in (no owner yet)."""

    month: str = Field(..., pattern=MONTH_KEY_PATTERN)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
