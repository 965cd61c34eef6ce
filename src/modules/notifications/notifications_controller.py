# src/modules/notifications/notifications_controller.py
"""Notification routes, shared by every role."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.common.utils.errors import NotFound
from src.common.utils.global_functions import to_http_exception
from src.common.utils.global_messages import GlobalMessages
from src.auth.dependencies import get_current_user
from src.models.models import User

from . import notifications_service as service
from .schemas import NotificationsListResponse, MarkReadRequest, MarkReadResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationsListResponse)
async def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Unread first, then newest."""
    return await service.list_notifications(db, current_user, limit, unread_only)


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
    request: MarkReadRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    count = await service.mark_notifications_read(db, current_user, request.notification_ids)
    return MarkReadResponse(success=True, marked_count=count)


@router.post("/mark-all-read", response_model=MarkReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    count = await service.mark_all_read(db, current_user)
    return MarkReadResponse(success=True, marked_count=count)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Delete one of the caller's notifications."""
    if not await service.delete_notification(db, current_user, notification_id):
        raise to_http_exception(NotFound(GlobalMessages.NOTIFICATION_NOT_FOUND))
    return {"success": True}
