"""Notification schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from utils.clock import utc_now

NotificationType = Literal[
    "info", "warning", "success", "error", "training", "maintenance"
]


class NotificationCreate(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    type: NotificationType
    user_id: Optional[str] = Field(
        default=None,
        description="Target user; None broadcasts to everyone.",
    )
    is_read: bool = False


class Notification(NotificationCreate):
    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
