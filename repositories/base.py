from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class PgRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _execute(self, stmt: Any) -> Any:
        try:
            return await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Query failed in %s: %s", type(self).__name__, exc)
            raise StoreUnavailable(str(exc)) from exc

    async def _get(self, model: Any, record_id: int) -> Any:
        try:
            return await self._session.get(model, record_id)
        except SQLAlchemyError as exc:
            logger.exception("Lookup of %s %s failed: %s", model.__name__, record_id, exc)
            raise StoreUnavailable(str(exc)) from exc

    async def _add(self, row: Any) -> Any:
        self._session.add(row)
        await self._flush()
        return row

    async def _remove(self, row: Any) -> None:
        try:
            await self._session.delete(row)
        except SQLAlchemyError as exc:
            logger.exception("Delete failed in %s: %s", type(self).__name__, exc)
            raise StoreUnavailable(str(exc)) from exc
        await self._flush()

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            logger.exception("Flush failed in %s: %s", type(self).__name__, exc)
            raise StoreUnavailable(str(exc)) from exc

    async def _apply(self, row: Any, changes: dict) -> Any:
        for key, value in changes.items():
            setattr(row, key, value)
        await self._flush()
        return row

    async def commit(self) -> None:
        """Persist pending changes now, independent of the request outcome."""
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit failed in %s: %s", type(self).__name__, exc)
            raise StoreUnavailable(str(exc)) from exc
