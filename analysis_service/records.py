from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from analysis_service.money import ZERO, amount_or_zero

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_GOAL_CATEGORY = "Savings"
TRANSACTION_TYPES = ("income", "expense")

TransactionType = Literal["income", "expense"]


def _field(source: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key among `names` from an ORM row or a dict."""
    for name in names:
        if isinstance(source, dict):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return default


def as_utc(value: Any) -> Optional[datetime]:
    """Coerce datetimes, dates and ISO strings to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Any = None
    owner_id: Any = None
    type: TransactionType
    amount: Decimal
    category: str = DEFAULT_CATEGORY
    date: datetime
    description: str = ""
    amount_valid: bool = True

    @classmethod
    def from_source(cls, source: Any, now: Optional[datetime] = None) -> Optional["TransactionRecord"]:
        """
        Normalize a store row (ORM object or dict, snake_case or camelCase) into a record.

        Missing category becomes "General", missing date becomes `now`. An unparseable
        amount is kept as zero with `amount_valid=False`. Rows with an unknown type or an
        unreadable date cannot be placed in any aggregate and are skipped (None).
        """
        record_id = _field(source, "id")
        tx_type = _field(source, "type")
        if tx_type not in TRANSACTION_TYPES:
            logger.warning("Skipping transaction %r with unknown type %r", record_id, tx_type)
            return None

        raw_date = _field(source, "date")
        if raw_date is None:
            when = as_utc(now) or utcnow()
        else:
            when = as_utc(raw_date)
        if when is None:
            logger.warning("Skipping transaction %r with unreadable date %r", record_id, raw_date)
            return None

        amount, valid = amount_or_zero(_field(source, "amount"), context=f"transaction {record_id}")
        return cls(
            id=record_id,
            owner_id=_field(source, "user_id", "owner_id", "userId", "ownerId"),
            type=tx_type,
            amount=amount,
            category=_field(source, "category") or DEFAULT_CATEGORY,
            date=when,
            description=_field(source, "description") or "",
            amount_valid=valid,
        )


class BudgetRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Any = None
    owner_id: Any = None
    category: str
    budget_amount: Decimal
    color: Optional[str] = None
    active: bool = True

    @classmethod
    def from_source(cls, source: Any) -> "BudgetRecord":
        record_id = _field(source, "id")
        amount, _ = amount_or_zero(_field(source, "budget_amount", "budgetAmount"), context=f"budget {record_id}")
        active = _field(source, "active")
        return cls(
            id=record_id,
            owner_id=_field(source, "user_id", "owner_id", "userId", "ownerId"),
            category=_field(source, "category") or DEFAULT_CATEGORY,
            budget_amount=amount,
            color=_field(source, "color"),
            active=True if active is None else bool(active),
        )


class GoalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Any = None
    owner_id: Any = None
    name: str = ""
    target_amount: Decimal
    saved_amount: Decimal = ZERO
    deadline: Optional[datetime] = None
    category: str = DEFAULT_GOAL_CATEGORY
    completed: bool = False

    @classmethod
    def from_source(cls, source: Any) -> "GoalRecord":
        record_id = _field(source, "id")
        target, _ = amount_or_zero(_field(source, "target_amount", "targetAmount"), context=f"goal {record_id}")
        saved_raw = _field(source, "saved_amount", "savedAmount")
        saved = ZERO
        if saved_raw is not None:
            saved, _ = amount_or_zero(saved_raw, context=f"goal {record_id}")
        return cls(
            id=record_id,
            owner_id=_field(source, "user_id", "owner_id", "userId", "ownerId"),
            name=_field(source, "name") or "",
            target_amount=target,
            saved_amount=saved,
            deadline=as_utc(_field(source, "deadline")),
            category=_field(source, "category") or DEFAULT_GOAL_CATEGORY,
            completed=bool(_field(source, "completed", default=False)),
        )


@dataclass(frozen=True)
class TransactionFilters:
    """Selection criteria shared by the store query and the in-memory filter.

    Date bounds may be dates or datetimes; both bounds are inclusive.
    """

    type: str = "all"
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None

    def window(self) -> Tuple[Optional[datetime], Optional[datetime]]:
        """
        Inclusive UTC bounds. A date-only end bound covers that whole day.
        """
        start = as_utc(self.start_date)
        end = as_utc(self.end_date)
        if end is not None and not isinstance(self.end_date, datetime):
            end = end + timedelta(days=1) - timedelta(microseconds=1)
        return start, end

    def matches(self, record: TransactionRecord) -> bool:
        if self.type != "all" and record.type != self.type:
            return False
        if self.category and self.category != "all" and record.category != self.category:
            return False
        start, end = self.window()
        if start is not None and record.date < start:
            return False
        if end is not None and record.date > end:
            return False
        if self.search and self.search.lower() not in record.description.lower():
            return False
        return True


def transaction_records(rows: Iterable[Any], now: Optional[datetime] = None) -> List[TransactionRecord]:
    """Normalize store rows, dropping the ones that cannot be aggregated."""
    records = (TransactionRecord.from_source(row, now) for row in rows)
    return [r for r in records if r is not None]
