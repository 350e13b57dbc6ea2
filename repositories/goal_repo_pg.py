from __future__ import annotations

from typing import Optional

from sqlalchemy import asc, select

from db.models import GoalTable
from repositories.base import PgRepository


class GoalRepositoryPg(PgRepository):
    async def list_for_owner(self, user_id: int) -> list[GoalTable]:
        stmt = select(GoalTable).where(GoalTable.user_id == user_id).order_by(asc(GoalTable.deadline))
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def get(self, goal_id: int) -> Optional[GoalTable]:
        return await self._get(GoalTable, goal_id)

    async def create(self, user_id: int, **fields) -> GoalTable:
        fields = {k: v for k, v in fields.items() if v is not None}
        return await self._add(GoalTable(user_id=user_id, **fields))

    async def update(self, row: GoalTable, changes: dict) -> GoalTable:
        return await self._apply(row, changes)

    async def delete(self, row: GoalTable) -> None:
        await self._remove(row)
