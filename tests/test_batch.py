# tests/test_batch.py

from uuid import uuid4

import pytest
from sqlalchemy import select, update

from src.common.database.batch import Increment, Insert, Update, UpdateIf, commit_batch
from src.common.utils.errors import AlreadyResolved, NotFound, PartialWriteFailure
from src.models.models import (
    DonorAppointment, Notification, Patient,
    MatchStatus, NotificationType, RequestStatus, UserRole
)
from src.modules.donor import donor_service
from src.modules.matching import matching_service
from src.modules.notifications import notifications_service

from .conftest import NOW


async def count_rows(session_factory, model, *criteria):
    async with session_factory() as other:
        result = await other.execute(select(model).where(*criteria))
        return len(result.scalars().all())


async def test_failed_write_rolls_back_whole_match(session, session_factory, fetch, factory, monkeypatch):
    clinic = await factory.clinic()
    patient = await factory.patient()
    donor = await factory.donor()
    patient_id, donor_id = patient.id, donor.id

    original = notifications_service.build_notification

    def broken_notification(**kwargs):
        notification = original(**kwargs)
        notification.title = None  # violates NOT NULL
        return notification

    monkeypatch.setattr(notifications_service, "build_notification", broken_notification)

    with pytest.raises(PartialWriteFailure):
        await matching_service.create_match(session, clinic, patient_id, donor_id, now=NOW)

    stored = await fetch(Patient, patient_id)
    assert stored.pending_matches == 0
    assert stored.request_status == RequestStatus.PENDING
    assert stored.assigned_clinic_id is None
    assert await count_rows(session_factory, DonorAppointment, DonorAppointment.linked_patient_id == patient_id) == 0
    assert await count_rows(session_factory, Notification) == 0


async def test_counter_violation_leaves_decline_unapplied(session, session_factory, fetch, factory):
    clinic = await factory.clinic()
    patient = await factory.patient()
    donor = await factory.donor()
    created = await matching_service.create_match(session, clinic, patient.id, donor.id, now=NOW)
    appointment_id, patient_id, donor_user_id = created.appointment.id, patient.id, donor.user_id

    # Simulate a counter that drifted to zero
    await session.execute(update(Patient).where(Patient.id == patient_id).values(pending_matches=0))
    await session.commit()

    with pytest.raises(PartialWriteFailure):
        await donor_service.decline_match(session, donor, appointment_id, now=NOW)

    appointment = await fetch(DonorAppointment, appointment_id)
    assert appointment.status == MatchStatus.PENDING_DONOR_ACCEPTANCE
    assert appointment.rejected_at is None
    assert await count_rows(
        session_factory, Notification,
        Notification.user_id == donor_user_id,
        Notification.type == NotificationType.MATCH_FOUND,
        Notification.is_read == True
    ) == 0
    assert await count_rows(session_factory, Notification, Notification.type == NotificationType.DONOR_DECLINED) == 0


async def test_update_if_guard_aborts_batch(session, session_factory, fetch, factory):
    patient = await factory.patient()
    patient_id, user_id = patient.id, patient.user_id

    note = notifications_service.build_notification(
        user_id=user_id,
        user_role=UserRole.PATIENT,
        notification_type=NotificationType.SYSTEM,
        title="Should not be saved",
        message="Guard failed"
    )

    with pytest.raises(AlreadyResolved) as exc_info:
        await commit_batch(session, [
            Insert(note),
            UpdateIf(
                Patient, patient_id,
                {"request_status": RequestStatus.ACCEPTED},
                {"request_status": RequestStatus.COMPLETED},
                message="Request moved on"
            ),
        ])

    assert exc_info.value.message == "Request moved on"
    assert (await fetch(Patient, patient_id)).request_status == RequestStatus.PENDING
    assert await count_rows(session_factory, Notification, Notification.user_id == user_id) == 0


async def test_update_if_applies_when_guard_holds(session, fetch, factory):
    patient = await factory.patient()

    await commit_batch(session, [
        UpdateIf(
            Patient, patient.id,
            {"request_status": RequestStatus.PENDING, "assigned_clinic_id": None},
            {"request_status": RequestStatus.REJECTED}
        ),
        Increment(Patient, patient.id, {"pending_matches": 2}),
        Update(Patient, patient.id, {"case_notes": "Checked"}),
    ])

    stored = await fetch(Patient, patient.id)
    assert stored.request_status == RequestStatus.REJECTED
    assert stored.pending_matches == 2
    assert stored.case_notes == "Checked"


async def test_increment_of_missing_row(session):
    with pytest.raises(NotFound):
        await commit_batch(session, [Increment(Patient, uuid4(), {"pending_matches": 1})])


class BadOperation:
    async def apply(self, session):
        raise TypeError("unexpected keyword 'colour'")


async def test_unexpected_error_rolls_back(session, session_factory, factory):
    patient = await factory.patient()
    note = notifications_service.build_notification(
        user_id=patient.user_id,
        user_role=UserRole.PATIENT,
        notification_type=NotificationType.SYSTEM,
        title="Never stored",
        message="Never stored",
        created_at=NOW
    )

    with pytest.raises(TypeError):
        await commit_batch(session, [Insert(note), BadOperation()])

    assert note not in session.new
    assert await count_rows(session_factory, Notification) == 0
