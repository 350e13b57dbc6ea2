from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from db.models import UserTable as User
from repositories.base import PgRepository


class UserRepositoryPg(PgRepository):
    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self._get(User, user_id)

    async def list_all(self) -> list[User]:
        res = await self._execute(select(User).order_by(User.id))
        return list(res.scalars().all())

    async def update(self, user: User, changes: dict) -> User:
        return await self._apply(user, changes)
