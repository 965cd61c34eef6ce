# tests/test_notifications.py

from datetime import timedelta

import pytest

from src.models.models import Notification, NotificationType, UserRole
from src.modules.notifications import notifications_service

from .conftest import NOW


@pytest.fixture
async def inbox(session, factory):
    """A donor with three notifications and a stranger with one."""
    donor = await factory.donor()
    stranger = await factory.donor("Maple")
    user, other_user = donor.user, stranger.user

    def note(owner, title, minutes_ago, is_read=False):
        notification = notifications_service.build_notification(
            user_id=owner.id,
            user_role=UserRole.DONOR,
            notification_type=NotificationType.SYSTEM,
            title=title,
            message=title,
            created_at=NOW - timedelta(minutes=minutes_ago)
        )
        notification.is_read = is_read
        return notification

    notes = [
        note(user, "old unread", 60),
        note(user, "new read", 1, is_read=True),
        note(user, "new unread", 5),
        note(other_user, "not yours", 0),
    ]
    session.add_all(notes)
    await session.commit()
    return user, other_user, notes


def test_build_notification_defaults():
    notification = notifications_service.build_notification(
        user_id=None,
        user_role=UserRole.PATIENT,
        notification_type=NotificationType.SYSTEM,
        title="Hello",
        message="World"
    )

    assert isinstance(notification, Notification)
    assert notification.id is not None
    assert notification.data == {}
    assert notification.is_read is False
    assert notification.created_at is not None


async def test_unread_first_then_newest(session, inbox):
    user, _, _ = inbox

    notifications, unread = await notifications_service.get_user_notifications(session, user)

    assert [n.title for n in notifications] == ["new unread", "old unread", "new read"]
    assert unread == 2


async def test_unread_only(session, inbox):
    user, _, _ = inbox

    notifications, _ = await notifications_service.get_user_notifications(session, user, unread_only=True)

    assert {n.title for n in notifications} == {"new unread", "old unread"}


async def test_mark_read_is_scoped_to_owner(session, inbox):
    user, other_user, notes = inbox

    marked = await notifications_service.mark_notifications_read(session, user, [notes[0].id, notes[3].id])

    assert marked == 1
    _, unread = await notifications_service.get_user_notifications(session, user)
    _, other_unread = await notifications_service.get_user_notifications(session, other_user)
    assert unread == 1
    assert other_unread == 1


async def test_mark_all_read(session, inbox):
    user, _, _ = inbox

    assert await notifications_service.mark_all_read(session, user) == 2
    _, unread = await notifications_service.get_user_notifications(session, user)
    assert unread == 0


async def test_delete_only_own_notification(session, inbox):
    user, other_user, notes = inbox

    assert await notifications_service.delete_notification(session, user, notes[3].id) is False
    assert await notifications_service.delete_notification(session, other_user, notes[3].id) is True

    remaining, _ = await notifications_service.get_user_notifications(session, other_user)
    assert remaining == []


async def test_list_notifications_response(session, inbox):
    user, _, notes = inbox

    response = await notifications_service.list_notifications(session, user, limit=2)

    assert response.unread_count == 2
    assert [n.title for n in response.notifications] == ["new unread", "old unread"]
    assert response.notifications[0].type == "system"
    assert response.notifications[0].user_role == "donor"
    assert response.notifications[0].data == {}
