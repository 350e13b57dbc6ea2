from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from schemas.base import ApiModel, Money

RecurringInterval = Literal["daily", "weekly", "monthly", "yearly"]


class TransactionCreate(ApiModel):
    # Required fields are checked by the route so clients get a 400 with a message
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    date: Optional[datetime] = None
    recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None
    notes: Optional[str] = None


class TransactionUpdate(ApiModel):
    description: Optional[str] = Field(default=None, max_length=255)
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    date: Optional[datetime] = None
    recurring: Optional[bool] = None
    recurring_interval: Optional[RecurringInterval] = None
    notes: Optional[str] = None


class TransactionRead(ApiModel):
    id: int
    user_id: int
    description: str
    amount: Money
    type: str
    category: str
    date: datetime
    recurring: bool = False
    recurring_interval: Optional[str] = None
    notes: Optional[str] = None


class TransactionPage(ApiModel):
    transactions: List[TransactionRead]
    total: int
    page: int
    pages: int
