from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from analysis_service.analysis_routes import categories, monthly


@pytest.mark.asyncio
async def test_monthly_report_current_month(transaction_repo, user):
    now = datetime.now(timezone.utc)
    await transaction_repo.create(user.id, description="Pay", amount=Decimal("1000"), type="income", category="Salary", date=now)
    await transaction_repo.create(user.id, description="Rent", amount=Decimal("400"), type="expense", category="Home", date=now)

    report = await monthly(months=3, user=user, repo=transaction_repo)

    assert len(report.series) == 4
    assert report.series[-1].income == Decimal("1000")
    assert report.series[-1].savings == Decimal("600")
    assert report.summary.savings_rate == 60


@pytest.mark.asyncio
async def test_monthly_rejects_unknown_window(transaction_repo, user):
    with pytest.raises(HTTPException) as exc:
        await monthly(months=5, user=user, repo=transaction_repo)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_category_breakdown(transaction_repo, user):
    now = datetime.now(timezone.utc)
    await transaction_repo.create(user.id, description="Pay", amount=Decimal("10"), type="income", category="Salary", date=now)
    await transaction_repo.create(user.id, description="Tea", amount=Decimal("2"), type="expense", category=None, date=now)

    result = await categories(user=user, repo=transaction_repo)

    assert result.income == {"Salary": Decimal("10")}
    assert result.expense == {"General": Decimal("2")}
