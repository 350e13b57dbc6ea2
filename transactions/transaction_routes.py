from __future__ import annotations

import logging
import math
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from analysis_service.money import is_storable_amount
from analysis_service.records import DEFAULT_CATEGORY, TRANSACTION_TYPES, TransactionFilters, transaction_records
from analysis_service.transaction_stats import TransactionSummary, summarize_transactions
from db.models import UserTable as User
from db.postgres import get_async_session
from repositories.transaction_repo_pg import TransactionRepositoryPg
from settings.config import settings
from settings.deps import ensure_owner, get_current_user
from transactions.transaction_model import (
    TransactionCreate,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def get_transaction_repo(session: AsyncSession = Depends(get_async_session)) -> TransactionRepositoryPg:
    return TransactionRepositoryPg(session)


def _check_amount(amount: Optional[Decimal]) -> None:
    if not is_storable_amount(amount):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount must be a positive number.")


@router.get("/stats", response_model=TransactionSummary)
async def transaction_stats(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> TransactionSummary:
    filters = TransactionFilters(start_date=start_date, end_date=end_date)
    rows = await repo.list_all_for_owner(user.id, filters)
    return summarize_transactions(transaction_records(rows), start_date, end_date)


@router.get("/", response_model=TransactionPage)
async def list_transactions(
    type: str = Query(default="all", pattern="^(income|expense|all)$"),
    category: Optional[str] = Query(default=None),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> TransactionPage:
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    filters = TransactionFilters(type=type, category=category, start_date=start_date, end_date=end_date, search=search)
    rows, total = await repo.list_for_owner(user.id, filters, page=page, limit=limit)
    return TransactionPage(
        transactions=[TransactionRead.model_validate(r) for r in rows],
        total=total,
        page=page,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.post("/", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def add_transaction(
    body: TransactionCreate,
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> TransactionRead:
    if not body.description or body.amount is None or not body.type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Description, amount, and type are required.")
    if body.type not in TRANSACTION_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Type must be income or expense.")
    _check_amount(body.amount)
    row = await repo.create(
        user.id,
        description=body.description,
        amount=body.amount,
        type=body.type,
        category=body.category or None,
        date=body.date,
        recurring=body.recurring,
        recurring_interval=body.recurring_interval,
        notes=body.notes,
    )
    logger.info("User %s added %s transaction %s", user.id, body.type, row.id)
    return TransactionRead.model_validate(row)


@router.put("/{transaction_id}", response_model=TransactionRead)
async def update_transaction(
    transaction_id: int,
    body: TransactionUpdate,
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> TransactionRead:
    row = ensure_owner(await repo.get(transaction_id), user, "Transaction", "update")
    changes = body.model_dump(exclude_unset=True)
    if "type" in changes and changes["type"] != row.type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Transaction type cannot be changed.")
    if "amount" in changes:
        _check_amount(changes["amount"])
    if "description" in changes and not changes["description"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Description cannot be empty.")
    if "category" in changes and not changes["category"]:
        changes["category"] = DEFAULT_CATEGORY
    changes = {k: v for k, v in changes.items() if not (v is None and k in ("date", "recurring"))}
    row = await repo.update(row, changes)
    return TransactionRead.model_validate(row)


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> dict[str, str]:
    row = ensure_owner(await repo.get(transaction_id), user, "Transaction", "delete")
    await repo.delete(row)
    return {"message": "Transaction deleted successfully."}
