from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from analysis_service.goal_progress import GoalStats, add_to_goal, goal_progress, goal_stats
from analysis_service.money import MAX_AMOUNT, is_storable_amount
from analysis_service.records import DEFAULT_GOAL_CATEGORY, GoalRecord, as_utc, utcnow
from budgets.budget_routes import random_color
from db.models import UserTable as User
from db.postgres import get_async_session
from goals.goal_model import GoalContribution, GoalCreate, GoalRead, GoalUpdate
from repositories.goal_repo_pg import GoalRepositoryPg
from settings.deps import ensure_owner, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/goals", tags=["goals"])


def get_goal_repo(session: AsyncSession = Depends(get_async_session)) -> GoalRepositoryPg:
    return GoalRepositoryPg(session)


def to_goal_read(row) -> GoalRead:
    progress = goal_progress(GoalRecord.from_source(row))
    return GoalRead(**progress.model_dump(), color=row.color, notes=row.notes)


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _check_target(amount: Optional[Decimal]) -> None:
    if not is_storable_amount(amount):
        raise _bad_request("Target amount must be greater than zero.")


def _check_deadline(deadline: datetime) -> None:
    if as_utc(deadline) <= utcnow():
        raise _bad_request("Deadline must be in the future.")


@router.get("/stats", response_model=GoalStats)
async def get_goal_stats(
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> GoalStats:
    goals = await repo.list_for_owner(user.id)
    return goal_stats(GoalRecord.from_source(g) for g in goals)


@router.get("/", response_model=List[GoalRead])
async def list_goals(
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> List[GoalRead]:
    return [to_goal_read(g) for g in await repo.list_for_owner(user.id)]


@router.post("/", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    body: GoalCreate,
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> GoalRead:
    if not body.name or body.target_amount is None or body.deadline is None:
        raise _bad_request("Name, target amount, and deadline are required.")
    _check_target(body.target_amount)
    _check_deadline(body.deadline)
    row = await repo.create(
        user.id,
        name=body.name,
        target_amount=body.target_amount,
        saved_amount=Decimal("0"),
        deadline=body.deadline,
        category=body.category or DEFAULT_GOAL_CATEGORY,
        color=body.color or random_color(),
        notes=body.notes,
        completed=False,
    )
    logger.info("User %s created goal %s", user.id, row.id)
    return to_goal_read(row)


@router.put("/{goal_id}/add", response_model=GoalRead)
async def add_to_goal_savings(
    goal_id: int,
    body: GoalContribution,
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> GoalRead:
    row = ensure_owner(await repo.get(goal_id), user, "Goal", "update")
    if not is_storable_amount(body.amount):
        raise _bad_request("Valid amount is required.")
    updated = add_to_goal(GoalRecord.from_source(row), body.amount)
    if updated.saved_amount >= MAX_AMOUNT:
        raise _bad_request("Saved amount would exceed the maximum goal size.")
    row = await repo.update(row, {"saved_amount": updated.saved_amount, "completed": updated.completed})
    if updated.completed:
        logger.info("Goal %s reached its target", goal_id)
    return to_goal_read(row)


@router.put("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: int,
    body: GoalUpdate,
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> GoalRead:
    row = ensure_owner(await repo.get(goal_id), user, "Goal", "update")
    changes: dict = {}
    if body.name:
        changes["name"] = body.name
    if body.target_amount is not None:
        _check_target(body.target_amount)
        changes["target_amount"] = body.target_amount
        # completed never reverts
        changes["completed"] = bool(row.completed) or Decimal(row.saved_amount) >= body.target_amount
    if body.deadline is not None:
        _check_deadline(body.deadline)
        changes["deadline"] = body.deadline
    if body.category:
        changes["category"] = body.category
    if body.color:
        changes["color"] = body.color
    if "notes" in body.model_fields_set:
        changes["notes"] = body.notes
    row = await repo.update(row, changes)
    return to_goal_read(row)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: int,
    user: User = Depends(get_current_user),
    repo: GoalRepositoryPg = Depends(get_goal_repo),
) -> dict[str, str]:
    row = ensure_owner(await repo.get(goal_id), user, "Goal", "delete")
    await repo.delete(row)
    return {"message": "Goal deleted successfully."}
