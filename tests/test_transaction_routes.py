from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from transactions.transaction_model import TransactionCreate, TransactionUpdate
from transactions.transaction_routes import (
    add_transaction,
    delete_transaction,
    list_transactions,
    transaction_stats,
    update_transaction,
)


async def _add(repo, user, **fields):
    body = TransactionCreate(**{"description": "Coffee", "amount": Decimal("3.50"), "type": "expense", **fields})
    return await add_transaction(body, user=user, repo=repo)


def _list_args(**overrides):
    args = dict(type="all", category=None, start_date=None, end_date=None, search=None, page=1, limit=None)
    args.update(overrides)
    return args


@pytest.mark.asyncio
async def test_add_transaction_defaults_category(transaction_repo, user):
    created = await _add(transaction_repo, user)

    assert created.category == "General"
    assert created.user_id == user.id
    assert created.amount == Decimal("3.50")


@pytest.mark.asyncio
async def test_add_transaction_requires_fields(transaction_repo, user):
    with pytest.raises(HTTPException) as exc:
        await add_transaction(TransactionCreate(amount=Decimal("1"), type="income"), user=user, repo=transaction_repo)
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await _add(transaction_repo, user, type="transfer")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await _add(transaction_repo, user, amount=Decimal("0"))
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_list_is_scoped_filtered_and_paginated(transaction_repo, user, other_user):
    for i in range(5):
        await _add(transaction_repo, user, description=f"Lunch {i}", date=datetime(2024, 3, i + 1, tzinfo=timezone.utc))
    await _add(transaction_repo, user, description="Salary", type="income", amount=Decimal("2000"))
    await _add(transaction_repo, other_user, description="Lunch elsewhere")

    page = await list_transactions(**_list_args(search="lunch", limit=2), user=user, repo=transaction_repo)

    assert page.total == 5
    assert page.pages == 3
    assert [t.description for t in page.transactions] == ["Lunch 4", "Lunch 3"]

    incomes = await list_transactions(**_list_args(type="income"), user=user, repo=transaction_repo)
    assert [t.description for t in incomes.transactions] == ["Salary"]

    march = await list_transactions(
        **_list_args(start_date=date(2024, 3, 2), end_date=date(2024, 3, 3)), user=user, repo=transaction_repo
    )
    assert march.total == 2


@pytest.mark.asyncio
async def test_stats_endpoint(transaction_repo, user, other_user):
    when = datetime(2024, 4, 2, tzinfo=timezone.utc)
    await _add(transaction_repo, user, type="income", amount=Decimal("1000"), category="Salary", date=when)
    await _add(transaction_repo, user, amount=Decimal("120.40"), category="Food", date=when)
    await _add(transaction_repo, user, amount=Decimal("80"), date=when)
    await _add(transaction_repo, user, amount=Decimal("999"), date=datetime(2024, 5, 1, tzinfo=timezone.utc))
    await _add(transaction_repo, other_user, amount=Decimal("5000"), date=when)

    stats = await transaction_stats(
        start_date=date(2024, 4, 1), end_date=date(2024, 4, 30), user=user, repo=transaction_repo
    )

    assert stats.total_income == Decimal("1000")
    assert stats.total_expenses == Decimal("200.40")
    assert stats.net_savings == Decimal("799.60")
    assert stats.category_breakdown == {"Food": Decimal("120.40"), "General": Decimal("80")}
    assert stats.transaction_count == 3


@pytest.mark.asyncio
async def test_update_checks_ownership_and_type(transaction_repo, user, other_user):
    created = await _add(transaction_repo, user)

    with pytest.raises(HTTPException) as exc:
        await update_transaction(created.id, TransactionUpdate(amount=Decimal("9")), user=other_user, repo=transaction_repo)
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        await update_transaction(created.id, TransactionUpdate(type="income"), user=user, repo=transaction_repo)
    assert exc.value.status_code == 400

    updated = await update_transaction(
        created.id, TransactionUpdate(amount=Decimal("9"), category=""), user=user, repo=transaction_repo
    )
    assert updated.amount == Decimal("9")
    assert updated.category == "General"
    assert updated.description == "Coffee"


@pytest.mark.asyncio
async def test_delete_transaction(transaction_repo, user, other_user):
    created = await _add(transaction_repo, user)

    with pytest.raises(HTTPException) as exc:
        await delete_transaction(created.id, user=other_user, repo=transaction_repo)
    assert exc.value.status_code == 403

    result = await delete_transaction(created.id, user=user, repo=transaction_repo)
    assert result == {"message": "Transaction deleted successfully."}

    with pytest.raises(HTTPException) as exc:
        await delete_transaction(created.id, user=user, repo=transaction_repo)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_amount_must_fit_money_column(transaction_repo, user):
    for bad in ("0.001", "1.005", "100000000", "123456789012.34"):
        with pytest.raises(HTTPException) as exc:
            await _add(transaction_repo, user, amount=Decimal(bad))
        assert exc.value.status_code == 400
        assert exc.value.detail == "Amount must be a positive number."

    smallest = await _add(transaction_repo, user, amount=Decimal("0.01"))
    largest = await _add(transaction_repo, user, amount=Decimal("99999999.99"))
    assert smallest.amount == Decimal("0.01")
    assert largest.amount == Decimal("99999999.99")

    with pytest.raises(HTTPException) as exc:
        await update_transaction(smallest.id, TransactionUpdate(amount=Decimal("0.001")), user=user, repo=transaction_repo)
    assert exc.value.status_code == 400
    assert len(transaction_repo.rows) == 2
