from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from analysis_service.money import ZERO, percent
from analysis_service.records import BudgetRecord, TransactionRecord, as_utc, utcnow
from schemas.base import ApiModel, Money

WARNING_PERCENT = 75.0
CRITICAL_PERCENT = 90.0


class BudgetProgress(ApiModel):
    id: Optional[int] = None
    category: str
    budget_amount: Money
    color: Optional[str] = None
    active: bool = True
    spent: Money = ZERO
    remaining: Money = ZERO
    # Unclamped: above 100 means overspent
    percentage: float = 0.0
    alert_level: str = "on_track"


class BudgetStats(ApiModel):
    total_budget: Money = ZERO
    total_spent: Money = ZERO
    total_remaining: Money = ZERO
    budget_count: int = 0


def month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First instant and last instant (inclusive) of the calendar month containing `now` (UTC)."""
    current = as_utc(now) or utcnow()
    start = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_day = calendar.monthrange(current.year, current.month)[1]
    end = start.replace(day=last_day) + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def alert_level(percentage: float, warning: float = WARNING_PERCENT, critical: float = CRITICAL_PERCENT) -> str:
    if percentage >= critical:
        return "critical"
    if percentage >= warning:
        return "warning"
    return "on_track"


def budget_progress(
    budget: BudgetRecord,
    spent: Optional[Decimal],
    warning: float = WARNING_PERCENT,
    critical: float = CRITICAL_PERCENT,
) -> BudgetProgress:
    """Pair a budget with its month-to-date spend. A missing spend (no matching rows) is zero."""
    spent = spent or ZERO
    pct = percent(spent, budget.budget_amount)
    return BudgetProgress(
        id=budget.id,
        category=budget.category,
        budget_amount=budget.budget_amount,
        color=budget.color,
        active=budget.active,
        spent=spent,
        remaining=budget.budget_amount - spent,
        percentage=pct,
        alert_level=alert_level(pct, warning, critical),
    )


def budget_stats(budgets: Iterable[BudgetRecord], total_spent: Optional[Decimal]) -> BudgetStats:
    """
    Aggregate over active budgets. `total_spent` is the owner's whole month-to-date
    expense total, not only the budgeted categories.
    """
    active = [b for b in budgets if b.active]
    total_budget = sum((b.budget_amount for b in active), ZERO)
    total_spent = total_spent or ZERO
    return BudgetStats(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        budget_count=len(active),
    )


def month_expenses(
    records: Iterable[TransactionRecord],
    now: Optional[datetime] = None,
    category: Optional[str] = None,
) -> Decimal:
    start, end = month_window(now)
    return sum(
        (
            r.amount
            for r in records
            if r.type == "expense" and start <= r.date <= end and (category is None or r.category == category)
        ),
        ZERO,
    )


def budget_progress_from_transactions(
    budgets: Iterable[BudgetRecord],
    records: Iterable[TransactionRecord],
    now: Optional[datetime] = None,
    warning: float = WARNING_PERCENT,
    critical: float = CRITICAL_PERCENT,
) -> List[BudgetProgress]:
    """Same figures as the store-backed path, recomputed from a raw transaction list."""
    records = list(records)
    return [
        budget_progress(b, month_expenses(records, now, b.category), warning, critical)
        for b in budgets
        if b.active
    ]
