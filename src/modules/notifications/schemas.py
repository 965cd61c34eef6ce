# src/modules/notifications/schemas.py
"""Notification schemas."""

from typing import Any, Dict, Optional, List
from uuid import UUID
from pydantic import BaseModel, Field
from datetime import datetime


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    user_role: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    responded_at: Optional[datetime] = None
    reference_id: Optional[UUID] = None
    reference_type: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationsListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class MarkReadRequest(BaseModel):
    notification_ids: List[UUID] = Field(..., min_length=1)


class MarkReadResponse(BaseModel):
    success: bool
    marked_count: int
