from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from db.models import BudgetTable
from repositories.base import PgRepository


class BudgetRepositoryPg(PgRepository):
    async def list_active(self, user_id: int) -> list[BudgetTable]:
        stmt = (
            select(BudgetTable)
            .where(BudgetTable.user_id == user_id, BudgetTable.active.is_(True))
            .order_by(BudgetTable.category)
        )
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def get(self, budget_id: int) -> Optional[BudgetTable]:
        return await self._get(BudgetTable, budget_id)

    async def get_by_category(self, user_id: int, category: str) -> Optional[BudgetTable]:
        stmt = select(BudgetTable).where(BudgetTable.user_id == user_id, BudgetTable.category == category)
        res = await self._execute(stmt)
        return res.scalars().first()

    async def create(self, user_id: int, category: str, budget_amount, color: str) -> BudgetTable:
        return await self._add(BudgetTable(user_id=user_id, category=category, budget_amount=budget_amount, color=color, active=True))

    async def update(self, row: BudgetTable, changes: dict) -> BudgetTable:
        return await self._apply(row, changes)

    async def delete(self, row: BudgetTable) -> None:
        await self._remove(row)
