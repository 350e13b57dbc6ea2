from __future__ import annotations

import logging
import random
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from analysis_service.budget_progress import (
    BudgetProgress,
    BudgetStats,
    budget_progress,
    budget_stats,
    month_window,
)
from analysis_service.money import is_storable_amount
from analysis_service.records import BudgetRecord
from budgets.budget_model import BudgetCreate, BudgetUpdate
from db.models import UserTable as User
from db.postgres import get_async_session
from repositories.budget_repo_pg import BudgetRepositoryPg
from repositories.transaction_repo_pg import TransactionRepositoryPg
from settings.config import settings
from settings.deps import ensure_owner, get_current_user
from transactions.transaction_routes import get_transaction_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/budgets", tags=["budgets"])


def get_budget_repo(session: AsyncSession = Depends(get_async_session)) -> BudgetRepositoryPg:
    return BudgetRepositoryPg(session)


def random_color() -> str:
    return f"#{random.randint(0, 0xFFFFFF):06x}"


async def _with_progress(row, user: User, transactions: TransactionRepositoryPg) -> BudgetProgress:
    start, end = month_window()
    spent = await transactions.sum_expenses(user.id, start, end, category=row.category)
    return budget_progress(
        BudgetRecord.from_source(row),
        spent,
        warning=settings.BUDGET_WARNING_PERCENT,
        critical=settings.BUDGET_CRITICAL_PERCENT,
    )


@router.get("/stats", response_model=BudgetStats)
async def get_budget_stats(
    user: User = Depends(get_current_user),
    repo: BudgetRepositoryPg = Depends(get_budget_repo),
    transactions: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> BudgetStats:
    budgets = await repo.list_active(user.id)
    start, end = month_window()
    total_spent = await transactions.sum_expenses(user.id, start, end)
    return budget_stats([BudgetRecord.from_source(b) for b in budgets], total_spent)


@router.get("/", response_model=List[BudgetProgress])
async def list_budgets(
    user: User = Depends(get_current_user),
    repo: BudgetRepositoryPg = Depends(get_budget_repo),
    transactions: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> List[BudgetProgress]:
    budgets = await repo.list_active(user.id)
    return [await _with_progress(b, user, transactions) for b in budgets]


@router.post("/", response_model=BudgetProgress, status_code=status.HTTP_201_CREATED)
async def create_budget(
    body: BudgetCreate,
    user: User = Depends(get_current_user),
    repo: BudgetRepositoryPg = Depends(get_budget_repo),
    transactions: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> BudgetProgress:
    if not body.category or body.budget_amount is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category and budget amount are required.")
    if not is_storable_amount(body.budget_amount):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Budget amount must be greater than zero.")
    if await repo.get_by_category(user.id, body.category) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Budget for this category already exists.")
    row = await repo.create(user.id, body.category, body.budget_amount, body.color or random_color())
    logger.info("User %s created budget %s for %s", user.id, row.id, row.category)
    return await _with_progress(row, user, transactions)


@router.put("/{budget_id}", response_model=BudgetProgress)
async def update_budget(
    budget_id: int,
    body: BudgetUpdate,
    user: User = Depends(get_current_user),
    repo: BudgetRepositoryPg = Depends(get_budget_repo),
    transactions: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> BudgetProgress:
    row = ensure_owner(await repo.get(budget_id), user, "Budget", "update")
    changes = {}
    if body.budget_amount is not None:
        if not is_storable_amount(body.budget_amount):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Budget amount must be greater than zero.")
        changes["budget_amount"] = body.budget_amount
    if body.color:
        changes["color"] = body.color
    if body.active is not None:
        changes["active"] = body.active
    row = await repo.update(row, changes)
    return await _with_progress(row, user, transactions)


@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: int,
    user: User = Depends(get_current_user),
    repo: BudgetRepositoryPg = Depends(get_budget_repo),
) -> dict[str, str]:
    row = ensure_owner(await repo.get(budget_id), user, "Budget", "delete")
    await repo.delete(row)
    return {"message": "Budget deleted successfully."}
