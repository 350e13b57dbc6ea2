from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from analysis_service.records import as_utc, utcnow
from db.models import UserTable as User
from db.postgres import get_async_session
from repositories.user_repo_pg import UserRepositoryPg

logger = logging.getLogger(__name__)


def get_user_repo(session: AsyncSession = Depends(get_async_session)) -> UserRepositoryPg:
	return UserRepositoryPg(session)


async def ensure_account_usable(user: User, repo: UserRepositoryPg, now: datetime | None = None) -> User:
	"""
	Reject accounts that may not use the API.
	An expired trial demotes an active non-admin account to pending_activation.
	"""
	now = now or utcnow()
	trial_ends_at = as_utc(user.trial_ends_at)
	if trial_ends_at is not None and trial_ends_at < now and user.role != "admin":
		if user.account_status == "active":
			logger.info("Trial expired for user %s; marking pending_activation", user.id)
			await repo.update(user, {"account_status": "pending_activation"})
			# The request is rejected below, so commit before the session rolls back
			await repo.commit()
		raise HTTPException(
			status_code=status.HTTP_403_FORBIDDEN,
			detail="Your trial period has expired. Please contact an administrator to activate your account.",
		)
	if user.account_status != "active":
		raise HTTPException(
			status_code=status.HTTP_403_FORBIDDEN,
			detail=f"Your account is currently {user.account_status}. Access denied.",
		)
	return user


async def get_current_user(
	x_user_id: str | None = Header(default=None),
	repo: UserRepositoryPg = Depends(get_user_repo),
) -> User:
	"""
	Resolve the caller from the `X-User-ID` header set by the upstream authenticator.
	"""
	if not x_user_id or not x_user_id.strip().isdigit():
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid X-User-ID header")
	user = await repo.get_by_id(int(x_user_id))
	if user is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
	return await ensure_account_usable(user, repo)


async def require_admin(user: User = Depends(get_current_user)) -> User:
	if user.role != "admin":
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Admin privileges required.")
	return user


def ensure_owner(row, user: User, kind: str, action: str):
	"""404 when the record does not exist, 403 when it belongs to someone else."""
	if row is None:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind} not found.")
	if row.user_id != user.id:
		raise HTTPException(
			status_code=status.HTTP_403_FORBIDDEN,
			detail=f"Forbidden: You can only {action} your own {kind.lower()}s.",
		)
	return row
