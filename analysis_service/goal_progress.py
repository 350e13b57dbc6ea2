from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from analysis_service.money import ZERO, percent
from analysis_service.records import GoalRecord, as_utc, utcnow
from schemas.base import ApiModel, Money

COMPLETED = "completed"
OVERDUE = "overdue"
IN_PROGRESS = "inProgress"

_SECONDS_PER_DAY = 24 * 60 * 60


class GoalProgress(ApiModel):
    id: Optional[int] = None
    name: str = ""
    category: str = ""
    target_amount: Money
    saved_amount: Money
    deadline: Optional[datetime] = None
    completed: bool = False
    progress: float = 0.0
    remaining: Money = ZERO
    status: str = IN_PROGRESS
    days_remaining: Optional[int] = None


class GoalStats(ApiModel):
    total_target: Money = ZERO
    total_saved: Money = ZERO
    completion_rate: float = 0.0
    completed_goals: int = 0
    active_goals: int = 0
    total_goals: int = 0


def is_reached(goal: GoalRecord) -> bool:
    return goal.completed or goal.saved_amount >= goal.target_amount


def goal_status(goal: GoalRecord, now: Optional[datetime] = None) -> str:
    """completed takes priority over overdue; everything else is in progress."""
    if is_reached(goal):
        return COMPLETED
    current = as_utc(now) or utcnow()
    if goal.deadline is not None and goal.deadline < current:
        return OVERDUE
    return IN_PROGRESS


def days_remaining(goal: GoalRecord, now: Optional[datetime] = None) -> Optional[int]:
    if goal.deadline is None:
        return None
    current = as_utc(now) or utcnow()
    return math.ceil((goal.deadline - current).total_seconds() / _SECONDS_PER_DAY)


def goal_progress(goal: GoalRecord, now: Optional[datetime] = None) -> GoalProgress:
    return GoalProgress(
        id=goal.id,
        name=goal.name,
        category=goal.category,
        target_amount=goal.target_amount,
        saved_amount=goal.saved_amount,
        deadline=goal.deadline,
        completed=goal.completed,
        progress=percent(goal.saved_amount, goal.target_amount),
        remaining=goal.target_amount - goal.saved_amount,
        status=goal_status(goal, now),
        days_remaining=days_remaining(goal, now),
    )


def add_to_goal(goal: GoalRecord, amount: Decimal) -> GoalRecord:
    """
    Return the goal with `amount` added to its savings.

    Raises ValueError for a non-positive amount. `completed` only ever flips to True.
    """
    if amount is None or amount <= ZERO:
        raise ValueError("Valid amount is required.")
    saved = goal.saved_amount + amount
    return goal.model_copy(update={"saved_amount": saved, "completed": goal.completed or saved >= goal.target_amount})


def goal_stats(goals: Iterable[GoalRecord]) -> GoalStats:
    goals = list(goals)
    total_target = sum((g.target_amount for g in goals), ZERO)
    total_saved = sum((g.saved_amount for g in goals), ZERO)
    completed = sum(1 for g in goals if g.completed)
    return GoalStats(
        total_target=total_target,
        total_saved=total_saved,
        completion_rate=percent(total_saved, total_target),
        completed_goals=completed,
        active_goals=len(goals) - completed,
        total_goals=len(goals),
    )
