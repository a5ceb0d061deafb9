"""Shared fixtures for the expense tracker tests."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from expense_tracker.models.expense import Category, Expense, PaymentMethod
from expense_tracker.models.session import AuthSession
from expense_tracker.services.storage import (
    InMemoryDatabase,
    InMemoryRowStore,
    RemoteExpenseStorage,
)


OWNER_A = UUID("11111111-1111-4111-8111-111111111111")
OWNER_B = UUID("22222222-2222-4222-8222-222222222222")

# Fixed reference date for period based tests
TODAY = date(2026, 10, 16)


def make_expense(
    amount,
    category: Category = Category.FOOD,
    day: date = TODAY,
    owner_id: UUID = OWNER_A,
    **overrides,
) -> Expense:
    """Build a persisted-looking expense with sensible defaults."""
    values = {
        "id": uuid4(),
        "owner_id": owner_id,
        "date": day,
        "category": category,
        "description": "Test expense",
        "amount": Decimal(str(amount)),
        "payment_method": PaymentMethod.UPI,
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Expense(**values)


@pytest.fixture
def session_a() -> AuthSession:
    return AuthSession(owner_id=OWNER_A, email="a@example.com")


@pytest.fixture
def session_b() -> AuthSession:
    return AuthSession(owner_id=OWNER_B, email="b@example.com")


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def store_a(session_a, database) -> InMemoryRowStore:
    return InMemoryRowStore(session_a, database)


@pytest.fixture
def store_b(session_b, database) -> InMemoryRowStore:
    return InMemoryRowStore(session_b, database)


@pytest.fixture
def storage_a(store_a) -> RemoteExpenseStorage:
    return RemoteExpenseStorage(store_a)


@pytest.fixture
def storage_b(store_b) -> RemoteExpenseStorage:
    return RemoteExpenseStorage(store_b)
