from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from analysis_service.monthly_series import LOOKBACK_MONTHS, MonthlyReport, monthly_report
from analysis_service.records import transaction_records
from analysis_service.transaction_stats import CategoryBreakdown, category_breakdown
from db.models import UserTable as User
from repositories.transaction_repo_pg import TransactionRepositoryPg
from settings.deps import get_current_user
from transactions.transaction_routes import get_transaction_repo


router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/monthly", response_model=MonthlyReport)
async def monthly(
    months: int = Query(default=6),
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> MonthlyReport:
    if months not in LOOKBACK_MONTHS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"months must be one of {', '.join(str(m) for m in LOOKBACK_MONTHS)}",
        )
    rows = await repo.list_all_for_owner(user.id)
    return monthly_report(transaction_records(rows), months)


@router.get("/categories", response_model=CategoryBreakdown)
async def categories(
    user: User = Depends(get_current_user),
    repo: TransactionRepositoryPg = Depends(get_transaction_repo),
) -> CategoryBreakdown:
    rows = await repo.list_all_for_owner(user.id)
    return category_breakdown(transaction_records(rows))
