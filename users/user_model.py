from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import EmailStr

from schemas.base import ApiModel

AccountStatus = Literal["active", "pending_activation", "deactivated"]
ACCOUNT_STATUSES = ("active", "pending_activation", "deactivated")


class UserRead(ApiModel):
    # hashed_password is deliberately absent
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    account_status: str
    trial_ends_at: Optional[datetime] = None
    role: str
    photo_url: Optional[str] = None
    currency: Optional[str] = None
    date_format: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    notification_settings: Dict[str, Any] = {}
    security_settings: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(ApiModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    currency: Optional[str] = None
    date_format: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None


class SettingsUpdate(ApiModel):
    notification_settings: Optional[Dict[str, Any]] = None
    security_settings: Optional[Dict[str, Any]] = None


class StatusUpdate(ApiModel):
    account_status: Optional[str] = None
