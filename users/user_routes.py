from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from db.models import UserTable as User
from repositories.user_repo_pg import UserRepositoryPg
from settings.deps import get_current_user, get_user_repo, require_admin
from users.user_model import ACCOUNT_STATUSES, ProfileUpdate, SettingsUpdate, StatusUpdate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])
profile_router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/", response_model=List[UserRead])
async def list_users(
    admin: User = Depends(require_admin),
    repo: UserRepositoryPg = Depends(get_user_repo),
) -> List[UserRead]:
    return [UserRead.model_validate(u) for u in await repo.list_all()]


@router.put("/{user_id}/status", response_model=UserRead)
async def update_user_status(
    user_id: int,
    body: StatusUpdate,
    admin: User = Depends(require_admin),
    repo: UserRepositoryPg = Depends(get_user_repo),
) -> UserRead:
    user = await repo.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    if body.account_status not in ACCOUNT_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid account status.")
    changes: dict = {"account_status": body.account_status}
    if body.account_status == "active":
        changes["trial_ends_at"] = None
    user = await repo.update(user, changes)
    logger.info("Admin %s set user %s status to %s", admin.id, user_id, body.account_status)
    return UserRead.model_validate(user)


@profile_router.get("/me", response_model=UserRead)
async def get_profile(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)


@profile_router.put("/me", response_model=UserRead)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    repo: UserRepositoryPg = Depends(get_user_repo),
) -> UserRead:
    # Empty values keep what is stored
    changes = {k: v for k, v in body.model_dump().items() if v}
    user = await repo.update(user, changes)
    return UserRead.model_validate(user)


@profile_router.put("/settings", response_model=UserRead)
async def update_settings(
    body: SettingsUpdate,
    user: User = Depends(get_current_user),
    repo: UserRepositoryPg = Depends(get_user_repo),
) -> UserRead:
    changes: dict = {}
    if body.notification_settings:
        changes["notification_settings"] = {**(user.notification_settings or {}), **body.notification_settings}
    if body.security_settings:
        changes["security_settings"] = {**(user.security_settings or {}), **body.security_settings}
    user = await repo.update(user, changes)
    return UserRead.model_validate(user)
