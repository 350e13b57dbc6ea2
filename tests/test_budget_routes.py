from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from budgets.budget_model import BudgetCreate, BudgetUpdate
from budgets.budget_routes import create_budget, delete_budget, get_budget_stats, list_budgets, update_budget


async def _spend(transaction_repo, user, amount, category):
    return await transaction_repo.create(
        user.id, description="spend", amount=Decimal(amount), type="expense", category=category,
        date=datetime.now(timezone.utc),
    )


async def _create(budget_repo, transaction_repo, user, category="Food", amount="500", color=None):
    body = BudgetCreate(category=category, budget_amount=Decimal(amount), color=color)
    return await create_budget(body, user=user, repo=budget_repo, transactions=transaction_repo)


@pytest.mark.asyncio
async def test_list_budgets_with_month_spend(budget_repo, transaction_repo, user):
    await _create(budget_repo, transaction_repo, user, "Food", "500")
    await _create(budget_repo, transaction_repo, user, "Bills", "200")
    await _spend(transaction_repo, user, "125", "Food")
    await _spend(transaction_repo, user, "190", "Bills")
    await transaction_repo.create(
        user.id, description="old", amount=Decimal("400"), type="expense", category="Food",
        date=datetime(2020, 1, 1, tzinfo=timezone.utc),
    )

    budgets = await list_budgets(user=user, repo=budget_repo, transactions=transaction_repo)

    assert [b.category for b in budgets] == ["Bills", "Food"]
    bills, food = budgets
    assert food.spent == Decimal("125")
    assert food.remaining == Decimal("375")
    assert food.percentage == 25.0
    assert bills.percentage == 95.0
    assert bills.alert_level == "critical"


@pytest.mark.asyncio
async def test_create_budget_validation(budget_repo, transaction_repo, user):
    created = await _create(budget_repo, transaction_repo, user)
    assert created.color.startswith("#") and len(created.color) == 7

    with pytest.raises(HTTPException) as exc:
        await _create(budget_repo, transaction_repo, user)
    assert exc.value.detail == "Budget for this category already exists."

    with pytest.raises(HTTPException) as exc:
        await _create(budget_repo, transaction_repo, user, category="Fun", amount="0")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await create_budget(BudgetCreate(category="Gym"), user=user, repo=budget_repo, transactions=transaction_repo)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_budget_stats_counts_all_month_expenses(budget_repo, transaction_repo, user):
    await _create(budget_repo, transaction_repo, user, "Food", "300")
    await _create(budget_repo, transaction_repo, user, "Rent", "1000")
    await _spend(transaction_repo, user, "100", "Food")
    await _spend(transaction_repo, user, "50", "Unbudgeted")

    stats = await get_budget_stats(user=user, repo=budget_repo, transactions=transaction_repo)

    assert stats.total_budget == Decimal("1300")
    assert stats.total_spent == Decimal("150")
    assert stats.total_remaining == Decimal("1150")
    assert stats.budget_count == 2


@pytest.mark.asyncio
async def test_update_and_deactivate_budget(budget_repo, transaction_repo, user, other_user):
    created = await _create(budget_repo, transaction_repo, user, "Food", "500", color="#112233")

    with pytest.raises(HTTPException) as exc:
        await update_budget(created.id, BudgetUpdate(budget_amount=Decimal("1")), user=other_user, repo=budget_repo, transactions=transaction_repo)
    assert exc.value.status_code == 403

    updated = await update_budget(
        created.id, BudgetUpdate(budget_amount=Decimal("250")), user=user, repo=budget_repo, transactions=transaction_repo
    )
    assert updated.budget_amount == Decimal("250")
    assert updated.color == "#112233"

    await update_budget(created.id, BudgetUpdate(active=False), user=user, repo=budget_repo, transactions=transaction_repo)
    assert await list_budgets(user=user, repo=budget_repo, transactions=transaction_repo) == []


@pytest.mark.asyncio
async def test_delete_budget(budget_repo, transaction_repo, user):
    created = await _create(budget_repo, transaction_repo, user)

    result = await delete_budget(created.id, user=user, repo=budget_repo)

    assert result == {"message": "Budget deleted successfully."}
    with pytest.raises(HTTPException) as exc:
        await delete_budget(created.id, user=user, repo=budget_repo)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_budget_amount_must_fit_money_column(budget_repo, transaction_repo, user):
    for bad in ("0.001", "12.345", "100000000"):
        with pytest.raises(HTTPException) as exc:
            await _create(budget_repo, transaction_repo, user, category=f"Cat {bad}", amount=bad)
        assert exc.value.detail == "Budget amount must be greater than zero."

    created = await _create(budget_repo, transaction_repo, user, amount="99999999.99")
    with pytest.raises(HTTPException) as exc:
        await update_budget(
            created.id, BudgetUpdate(budget_amount=Decimal("0.005")),
            user=user, repo=budget_repo, transactions=transaction_repo,
        )
    assert exc.value.status_code == 400
    assert budget_repo.rows[created.id].budget_amount == Decimal("99999999.99")
