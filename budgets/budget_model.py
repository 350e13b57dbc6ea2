from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from schemas.base import ApiModel

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class BudgetCreate(ApiModel):
    category: Optional[str] = Field(default=None, max_length=100)
    budget_amount: Optional[Decimal] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


class BudgetUpdate(ApiModel):
    budget_amount: Optional[Decimal] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    active: Optional[bool] = None
