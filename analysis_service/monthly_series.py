from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field

from analysis_service.money import ZERO, percent
from analysis_service.records import TransactionRecord, as_utc, utcnow
from schemas.base import ApiModel, Money

LOOKBACK_MONTHS = (3, 6, 12, 24)


class MonthlyPoint(ApiModel):
    month: str  # YYYY-MM
    label: str  # e.g. "Mar 2024"
    income: Money = ZERO
    expenses: Money = ZERO
    savings: Money = ZERO
    savings_rate: float = 0.0


class PeriodSummary(ApiModel):
    total_income: Money = ZERO
    total_expenses: Money = ZERO
    net_savings: Money = ZERO
    # Whole percent, for display
    savings_rate: int = 0


class MonthlyReport(ApiModel):
    months: int
    series: List[MonthlyPoint] = Field(default_factory=list)
    summary: PeriodSummary = Field(default_factory=PeriodSummary)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_keys(months: int, now: Optional[datetime] = None) -> List[Tuple[int, int]]:
    """Calendar months from `now - months` through `now`, oldest first (months + 1 buckets)."""
    current = as_utc(now) or utcnow()
    return [shift_month(current.year, current.month, -offset) for offset in range(months, -1, -1)]


def savings_rate(income: Decimal, expenses: Decimal) -> float:
    if income <= ZERO:
        return 0.0
    return percent(income - expenses, income)


def monthly_series(
    records: Iterable[TransactionRecord],
    months: int = 6,
    now: Optional[datetime] = None,
) -> List[MonthlyPoint]:
    """
    Bucket transactions into calendar months over the lookback window.

    Months without activity are present with zero totals. Records outside the
    window are ignored.
    """
    if months < 0:
        raise ValueError("months must be non-negative")
    keys = month_keys(months, now)
    income: Dict[Tuple[int, int], Decimal] = {k: ZERO for k in keys}
    expenses: Dict[Tuple[int, int], Decimal] = {k: ZERO for k in keys}
    for record in records:
        key = (record.date.year, record.date.month)
        if key not in income:
            continue
        if record.type == "income":
            income[key] += record.amount
        else:
            expenses[key] += record.amount

    series = []
    for year, month in keys:
        inc = income[(year, month)]
        exp = expenses[(year, month)]
        series.append(
            MonthlyPoint(
                month=f"{year:04d}-{month:02d}",
                label=datetime(year, month, 1).strftime("%b %Y"),
                income=inc,
                expenses=exp,
                savings=inc - exp,
                savings_rate=savings_rate(inc, exp),
            )
        )
    return series


def summarize_series(series: Iterable[MonthlyPoint]) -> PeriodSummary:
    series = list(series)
    total_income = sum((p.income for p in series), ZERO)
    total_expenses = sum((p.expenses for p in series), ZERO)
    rate = savings_rate(total_income, total_expenses)
    return PeriodSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_savings=total_income - total_expenses,
        savings_rate=math.floor(rate + 0.5),
    )


def monthly_report(
    records: Iterable[TransactionRecord],
    months: int = 6,
    now: Optional[datetime] = None,
) -> MonthlyReport:
    series = monthly_series(records, months, now)
    return MonthlyReport(months=months, series=series, summary=summarize_series(series))
