# src/modules/notifications/notifications_service.py
"""In-app notifications. Services add them to batches; users read and clear them."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4
from sqlalchemy import select, update, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.utils.global_functions import utc_now
from src.models.models import Notification, NotificationType, User, UserRole
from .schemas import NotificationResponse, NotificationsListResponse


def build_notification(
    user_id: UUID,
    user_role: UserRole,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    reference_id: Optional[UUID] = None,
    reference_type: Optional[str] = None,
    created_at: Optional[datetime] = None
) -> Notification:
    """Build an unsaved notification to be written as part of a batch."""

    return Notification(
        id=uuid4(),
        user_id=user_id,
        user_role=user_role,
        type=notification_type,
        title=title,
        message=message,
        data=data or {},
        reference_id=reference_id,
        reference_type=reference_type,
        is_read=False,
        created_at=created_at or utc_now()
    )


async def get_user_notifications(
    db: AsyncSession,
    user: User,
    limit: int = 20,
    unread_only: bool = False
) -> tuple[List[Notification], int]:
    """Get notifications for a user, unread first, with unread count."""

    # Base query
    query = select(Notification).where(Notification.user_id == user.id)

    if unread_only:
        query = query.where(Notification.is_read == False)

    query = (
        query.order_by(Notification.is_read, desc(Notification.created_at))
        .limit(limit)
        .execution_options(populate_existing=True)
    )

    result = await db.execute(query)
    notifications = result.scalars().all()

    # Get unread count
    count_query = select(func.count(Notification.id)).where(
        Notification.user_id == user.id,
        Notification.is_read == False
    )
    count_result = await db.execute(count_query)
    unread_count = count_result.scalar() or 0

    return list(notifications), unread_count


def build_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        title=notification.title,
        message=notification.message,
        type=notification.type.value,
        user_role=notification.user_role.value,
        data=notification.data or {},
        is_read=notification.is_read,
        responded_at=notification.responded_at,
        reference_id=notification.reference_id,
        reference_type=notification.reference_type,
        created_at=notification.created_at
    )


async def list_notifications(
    db: AsyncSession,
    user: User,
    limit: int = 20,
    unread_only: bool = False
) -> NotificationsListResponse:
    notifications, unread_count = await get_user_notifications(db, user, limit, unread_only)
    return NotificationsListResponse(
        notifications=[build_notification_response(n) for n in notifications],
        unread_count=unread_count
    )


async def mark_notifications_read(
    db: AsyncSession,
    user: User,
    notification_ids: List[UUID]
) -> int:
    """Mark notifications as read. Returns count of updated notifications."""

    stmt = (
        update(Notification)
        .where(
            Notification.id.in_(notification_ids),
            Notification.user_id == user.id
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(stmt)
    await db.commit()

    return result.rowcount


async def mark_all_read(db: AsyncSession, user: User) -> int:
    """Mark all notifications as read for a user."""

    stmt = (
        update(Notification)
        .where(
            Notification.user_id == user.id,
            Notification.is_read == False
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(stmt)
    await db.commit()

    return result.rowcount


async def delete_notification(db: AsyncSession, user: User, notification_id: UUID) -> bool:
    """Delete a notification. Returns True if deleted."""

    query = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user.id
    )
    result = await db.execute(query)
    notification = result.scalar_one_or_none()

    if notification:
        await db.delete(notification)
        await db.commit()
        return True

    return False
