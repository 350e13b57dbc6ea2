from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from analysis_service.goal_progress import GoalProgress
from budgets.budget_model import HEX_COLOR
from schemas.base import ApiModel


class GoalCreate(ApiModel):
    name: Optional[str] = Field(default=None, max_length=255)
    target_amount: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    category: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    notes: Optional[str] = None


class GoalUpdate(ApiModel):
    name: Optional[str] = Field(default=None, max_length=255)
    target_amount: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    category: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    notes: Optional[str] = None


class GoalContribution(ApiModel):
    amount: Optional[Decimal] = None


class GoalRead(GoalProgress):
    color: Optional[str] = None
    notes: Optional[str] = None
