from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import Select, desc, func, select

from analysis_service.records import TransactionFilters
from db.models import TransactionTable
from repositories.base import PgRepository


class TransactionRepositoryPg(PgRepository):
    def _filtered(self, user_id: int, filters: Optional[TransactionFilters]) -> Select[tuple[TransactionTable]]:
        stmt: Select[tuple[TransactionTable]] = select(TransactionTable).where(TransactionTable.user_id == user_id)
        if filters is None:
            return stmt
        if filters.type and filters.type != "all":
            stmt = stmt.where(TransactionTable.type == filters.type)
        if filters.category and filters.category != "all":
            stmt = stmt.where(TransactionTable.category == filters.category)
        start, end = filters.window()
        if start is not None:
            stmt = stmt.where(TransactionTable.date >= start)
        if end is not None:
            stmt = stmt.where(TransactionTable.date <= end)
        if filters.search:
            stmt = stmt.where(TransactionTable.description.ilike(f"%{filters.search}%"))
        return stmt

    async def list_for_owner(
        self,
        user_id: int,
        filters: Optional[TransactionFilters] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[list[TransactionTable], int]:
        stmt = self._filtered(user_id, filters)
        total_res = await self._execute(select(func.count()).select_from(stmt.subquery()))
        total = int(total_res.scalar_one())
        stmt = stmt.order_by(desc(TransactionTable.date)).offset((page - 1) * limit).limit(limit)
        res = await self._execute(stmt)
        return list(res.scalars().all()), total

    async def list_all_for_owner(self, user_id: int, filters: Optional[TransactionFilters] = None) -> list[TransactionTable]:
        stmt = self._filtered(user_id, filters).order_by(desc(TransactionTable.date))
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def get(self, transaction_id: int) -> Optional[TransactionTable]:
        return await self._get(TransactionTable, transaction_id)

    async def create(self, user_id: int, **fields) -> TransactionTable:
        fields = {k: v for k, v in fields.items() if v is not None}
        return await self._add(TransactionTable(user_id=user_id, **fields))

    async def update(self, row: TransactionTable, changes: dict) -> TransactionTable:
        return await self._apply(row, changes)

    async def delete(self, row: TransactionTable) -> None:
        await self._remove(row)

    async def sum_expenses(
        self,
        user_id: int,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> Decimal:
        stmt = select(func.sum(TransactionTable.amount)).where(
            TransactionTable.user_id == user_id,
            TransactionTable.type == "expense",
            TransactionTable.date.between(start, end),
        )
        if category is not None:
            stmt = stmt.where(TransactionTable.category == category)
        res = await self._execute(stmt)
        return res.scalar_one_or_none() or Decimal("0")
