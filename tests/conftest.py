import os
import sys

# Ensure project root is on sys.path so top-level packages resolve
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import itertools
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio

from analysis_service.records import TransactionRecord, as_utc
from db.models import DEFAULT_NOTIFICATION_SETTINGS, DEFAULT_SECURITY_SETTINGS


# --- Test utilities: fake in-memory record store ---


class _FakeRepo:
    def __init__(self) -> None:
        self.rows = {}
        self._ids = itertools.count(1)
        self.commits = 0

    def _insert(self, **fields):
        row = SimpleNamespace(id=next(self._ids), **fields)
        self.rows[row.id] = row
        return row

    async def get(self, record_id):
        return self.rows.get(record_id)

    async def update(self, row, changes: dict):
        for key, value in changes.items():
            setattr(row, key, value)
        return row

    async def delete(self, row) -> None:
        self.rows.pop(row.id, None)

    async def commit(self) -> None:
        self.commits += 1


class FakeTransactionRepo(_FakeRepo):
    async def create(self, user_id, **fields):
        return self._insert(
            user_id=user_id,
            description=fields["description"],
            amount=Decimal(str(fields["amount"])),
            type=fields["type"],
            category=fields.get("category") or "General",
            date=fields.get("date") or datetime.now(timezone.utc),
            recurring=fields.get("recurring") or False,
            recurring_interval=fields.get("recurring_interval"),
            notes=fields.get("notes"),
        )

    def _owned(self, user_id, filters=None):
        rows = [r for r in self.rows.values() if r.user_id == user_id]
        if filters is not None:
            rows = [r for r in rows if filters.matches(TransactionRecord.from_source(r))]
        return sorted(rows, key=lambda r: as_utc(r.date), reverse=True)

    async def list_for_owner(self, user_id, filters=None, page=1, limit=20):
        rows = self._owned(user_id, filters)
        start = (page - 1) * limit
        return rows[start:start + limit], len(rows)

    async def list_all_for_owner(self, user_id, filters=None):
        return self._owned(user_id, filters)

    async def sum_expenses(self, user_id, start, end, category=None):
        return sum(
            (
                r.amount
                for r in self.rows.values()
                if r.user_id == user_id
                and r.type == "expense"
                and start <= as_utc(r.date) <= end
                and (category is None or r.category == category)
            ),
            Decimal("0"),
        )


class FakeBudgetRepo(_FakeRepo):
    async def create(self, user_id, category, budget_amount, color):
        return self._insert(user_id=user_id, category=category, budget_amount=budget_amount, color=color, active=True)

    async def list_active(self, user_id):
        rows = [r for r in self.rows.values() if r.user_id == user_id and r.active]
        return sorted(rows, key=lambda r: r.category)

    async def get_by_category(self, user_id, category):
        for r in self.rows.values():
            if r.user_id == user_id and r.category == category:
                return r
        return None


class FakeGoalRepo(_FakeRepo):
    async def create(self, user_id, **fields):
        return self._insert(user_id=user_id, **fields)

    async def list_for_owner(self, user_id):
        rows = [r for r in self.rows.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: as_utc(r.deadline))


class FakeUserRepo(_FakeRepo):
    def add_user(self, **overrides):
        fields = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": f"user{len(self.rows) + 1}@example.com",
            "hashed_password": "hashed",
            "account_status": "active",
            "trial_ends_at": None,
            "role": "user",
            "photo_url": "/uploads/default-avatar.png",
            "currency": "USD",
            "date_format": "MM/DD/YYYY",
            "language": "en",
            "timezone": "UTC",
            "notification_settings": dict(DEFAULT_NOTIFICATION_SETTINGS),
            "security_settings": dict(DEFAULT_SECURITY_SETTINGS),
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return self._insert(**fields)

    async def get_by_id(self, user_id):
        return self.rows.get(user_id)

    async def list_all(self):
        return sorted(self.rows.values(), key=lambda r: r.id)


@pytest.fixture
def user_repo():
    return FakeUserRepo()


@pytest.fixture
def user(user_repo):
    return user_repo.add_user()


@pytest.fixture
def other_user(user_repo):
    return user_repo.add_user(first_name="Grace", last_name="Hopper")


@pytest.fixture
def admin(user_repo):
    return user_repo.add_user(first_name="Root", last_name="Admin", role="admin")


@pytest_asyncio.fixture
async def transaction_repo():
    yield FakeTransactionRepo()


@pytest_asyncio.fixture
async def budget_repo():
    yield FakeBudgetRepo()


@pytest_asyncio.fixture
async def goal_repo():
    yield FakeGoalRepo()
