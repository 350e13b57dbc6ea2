from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import Field

from analysis_service.money import ZERO
from analysis_service.records import TransactionFilters, TransactionRecord
from schemas.base import ApiModel, Money


class TransactionSummary(ApiModel):
    total_income: Money = ZERO
    total_expenses: Money = ZERO
    net_savings: Money = ZERO
    category_breakdown: Dict[str, Money] = Field(default_factory=dict)
    transaction_count: int = 0
    invalid_amount_count: int = 0


class CategoryBreakdown(ApiModel):
    income: Dict[str, Money] = Field(default_factory=dict)
    expense: Dict[str, Money] = Field(default_factory=dict)


def filter_transactions(records: Iterable[TransactionRecord], filters: Optional[TransactionFilters] = None) -> List[TransactionRecord]:
    """In-memory equivalent of the store's filtered query."""
    if filters is None:
        return list(records)
    return [r for r in records if filters.matches(r)]


def summarize_transactions(
    records: Iterable[TransactionRecord],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> TransactionSummary:
    """
    Totals for one owner's transactions, optionally restricted to an inclusive date window.

    The category breakdown covers expenses only. Sums are Decimal, so
    total_income - total_expenses == net_savings holds exactly.
    """
    if start_date is not None or end_date is not None:
        records = filter_transactions(records, TransactionFilters(start_date=start_date, end_date=end_date))

    income = ZERO
    expenses = ZERO
    breakdown: Dict[str, Decimal] = {}
    count = 0
    invalid = 0
    for record in records:
        count += 1
        if not record.amount_valid:
            invalid += 1
        if record.type == "income":
            income += record.amount
        else:
            expenses += record.amount
            breakdown[record.category] = breakdown.get(record.category, ZERO) + record.amount

    return TransactionSummary(
        total_income=income,
        total_expenses=expenses,
        net_savings=income - expenses,
        category_breakdown=breakdown,
        transaction_count=count,
        invalid_amount_count=invalid,
    )


def category_breakdown(records: Iterable[TransactionRecord]) -> CategoryBreakdown:
    result = CategoryBreakdown()
    for record in records:
        bucket = result.income if record.type == "income" else result.expense
        bucket[record.category] = bucket.get(record.category, ZERO) + record.amount
    return result
