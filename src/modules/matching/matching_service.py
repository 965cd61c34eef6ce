# src/modules/matching/matching_service.py
"""Clinic-side match lifecycle: link a donor, cancel, complete.

Every operation reads its preconditions, then writes the appointment, the
patient request counters and the notifications in one batch.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.batch import (
    Increment, Insert, Update, UpdateIf, UpdateWhere, commit_batch
)
from src.common.utils.errors import AlreadyResolved, NotFound, ValidationError
from src.common.utils.global_functions import utc_now
from src.common.utils.global_messages import GlobalMessages
from src.models.models import (
    Clinic, Donor, DonorAppointment, Notification, Patient,
    MatchStatus as DBMatchStatus, NotificationType, RequestStatus, UserRole
)
from src.modules.notifications import notifications_service
from .eligibility import evaluate_eligibility
from .scoring import calculate_match_score, is_same_city, is_urgent
from .schemas import (
    DonorAppointmentListResponse, DonorAppointmentResponse, MatchActionResponse,
    MatchCountersResponse, MatchStatus
)

logger = logging.getLogger(__name__)

OPEN_REQUEST_STATUSES = (RequestStatus.PENDING, RequestStatus.ACCEPTED)
REFERENCE_TYPE = "donor_appointment"


def build_appointment_response(appointment: DonorAppointment) -> DonorAppointmentResponse:
    """Convert a donor appointment row to its response schema."""
    return DonorAppointmentResponse(
        id=appointment.id,
        donor_id=appointment.donor_id,
        linked_patient_id=appointment.linked_patient_id,
        clinic_id=appointment.clinic_id,
        status=MatchStatus(appointment.status.value),
        match_score=appointment.match_score,
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        notes=appointment.notes,
        matched_at=appointment.matched_at,
        accepted_at=appointment.accepted_at,
        rejected_at=appointment.rejected_at,
        cancelled_at=appointment.cancelled_at,
        cancellation_reason=appointment.cancellation_reason,
        completed_at=appointment.completed_at
    )


async def load_fresh(session: AsyncSession, model, record_id: UUID):
    """Read a row from the database, overwriting any copy already in the session."""
    result = await session.execute(
        select(model)
        .where(model.id == record_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def mark_match_notification_read(appointment: DonorAppointment, donor: Donor, now: datetime) -> UpdateWhere:
    """Close the donor's "match found" notification for this appointment."""
    return UpdateWhere(
        Notification,
        [
            Notification.reference_id == appointment.id,
            Notification.user_id == donor.user_id,
            Notification.type == NotificationType.MATCH_FOUND,
        ],
        {"is_read": True, "responded_at": now}
    )


async def _get_open_request(session: AsyncSession, clinic: Clinic, patient_id: UUID) -> Patient:
    patient = await load_fresh(session, Patient, patient_id)
    if not patient:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)
    if patient.request_status not in OPEN_REQUEST_STATUSES:
        raise AlreadyResolved(GlobalMessages.REQUEST_NOT_OPEN)
    if patient.assigned_clinic_id is not None and patient.assigned_clinic_id != clinic.id:
        raise AlreadyResolved(GlobalMessages.REQUEST_ASSIGNED_ELSEWHERE)
    return patient


async def _get_clinic_appointment(
    session: AsyncSession,
    clinic: Clinic,
    appointment_id: UUID
) -> DonorAppointment:
    appointment = await load_fresh(session, DonorAppointment, appointment_id)
    if not appointment or appointment.clinic_id != clinic.id:
        raise NotFound(GlobalMessages.APPOINTMENT_NOT_FOUND)
    return appointment


# ============================================================================
# LINK DONOR TO REQUEST
# ============================================================================

async def create_match(
    session: AsyncSession,
    clinic: Clinic,
    patient_id: UUID,
    donor_id: UUID,
    notes: Optional[str] = None,
    now: Optional[datetime] = None
) -> MatchActionResponse:
    """Reserve ``donor_id`` for the patient's blood request.

    Several reservations may exist for the same request at once; the
    ``already_linked`` flag of the candidate search is advisory only.
    """
    now = now or utc_now()

    patient = await _get_open_request(session, clinic, patient_id)

    donor = await session.get(Donor, donor_id)
    if not donor:
        raise NotFound(GlobalMessages.DONOR_NOT_FOUND)
    if donor.blood_type != patient.blood_type:
        raise ValidationError(GlobalMessages.BLOOD_TYPE_MISMATCH)

    eligibility = evaluate_eligibility(donor, now)
    score = calculate_match_score(
        eligibility.is_eligible,
        eligibility.is_fit,
        is_same_city(donor.city, clinic.city or patient.city),
        is_urgent(patient.urgency),
        donor.donation_count
    )

    appointment = DonorAppointment(
        id=uuid4(),
        donor_id=donor.id,
        linked_patient_id=patient.id,
        clinic_id=clinic.id,
        status=DBMatchStatus.PENDING_DONOR_ACCEPTANCE,
        match_score=score,
        notes=notes,
        matched_at=now
    )
    event = {
        "appointmentId": str(appointment.id),
        "patientId": str(patient.id),
        "clinicId": str(clinic.id),
        "bloodType": patient.blood_type,
        "urgency": patient.urgency.value,
    }

    await commit_batch(session, [
        Insert(appointment),
        Insert(notifications_service.build_notification(
            user_id=donor.user_id,
            user_role=UserRole.DONOR,
            notification_type=NotificationType.MATCH_FOUND,
            title="Blood Donation Match",
            message=(
                f"{clinic.name} has matched {donor.dog_name} with a dog that needs "
                f"{patient.blood_type} blood. Please accept or decline."
            ),
            data={**event, "clinicName": clinic.name, "patientDogName": patient.dog_name},
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
        Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.DONOR_MATCHED,
            title="Donor Found",
            message="A compatible donor has been matched to your request. We will let you know once they confirm.",
            data=event,
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
        Increment(Patient, patient.id, {"pending_matches": 1}),
        # Still open and not taken by another clinic; other reservations may land first
        UpdateIf(
            Patient,
            patient.id,
            {},
            {"request_status": RequestStatus.ACCEPTED, "assigned_clinic_id": clinic.id},
            message=GlobalMessages.REQUEST_NOT_OPEN,
            criteria=(
                Patient.request_status.in_(OPEN_REQUEST_STATUSES),
                or_(Patient.assigned_clinic_id.is_(None), Patient.assigned_clinic_id == clinic.id),
            )
        ),
    ])
    await session.refresh(appointment)

    logger.info(
        "Donor %s linked to request %s by clinic %s (score %d)",
        donor.id, patient.id, clinic.id, score
    )
    return MatchActionResponse(
        success=True,
        message=GlobalMessages.MATCH_CREATED,
        appointment=build_appointment_response(appointment)
    )


# ============================================================================
# CLINIC ACTIONS ON EXISTING APPOINTMENTS
# ============================================================================

async def cancel_match(
    session: AsyncSession,
    clinic: Clinic,
    appointment_id: UUID,
    reason: Optional[str] = None,
    now: Optional[datetime] = None
) -> MatchActionResponse:
    """Cancel a reservation or a confirmed appointment."""
    now = now or utc_now()

    appointment = await _get_clinic_appointment(session, clinic, appointment_id)
    observed = appointment.status
    if observed == DBMatchStatus.PENDING_DONOR_ACCEPTANCE:
        counter = {"pending_matches": -1}
    elif observed == DBMatchStatus.CONFIRMED:
        counter = {"confirmed_matches": -1}
    else:
        raise AlreadyResolved(GlobalMessages.MATCH_ALREADY_RESOLVED)

    donor = await session.get(Donor, appointment.donor_id)
    patient = await session.get(Patient, appointment.linked_patient_id)
    event = {"appointmentId": str(appointment.id), "reason": reason}

    operations = [
        UpdateIf(
            DonorAppointment,
            appointment.id,
            {"status": observed},
            {
                "status": DBMatchStatus.CANCELLED,
                "cancelled_at": now,
                "cancellation_reason": reason,
            },
            message=GlobalMessages.MATCH_ALREADY_RESOLVED
        ),
        Increment(Patient, appointment.linked_patient_id, counter),
        Insert(notifications_service.build_notification(
            user_id=donor.user_id,
            user_role=UserRole.DONOR,
            notification_type=NotificationType.MATCH_CANCELLED,
            title="Appointment Cancelled",
            message=f"{clinic.name} has cancelled the donation appointment for {donor.dog_name}.",
            data=event,
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
    ]
    if observed == DBMatchStatus.PENDING_DONOR_ACCEPTANCE:
        operations.append(mark_match_notification_read(appointment, donor, now))
    else:
        operations.append(Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.MATCH_CANCELLED,
            title="Appointment Cancelled",
            message="Your transfusion appointment was cancelled. The clinic will find another donor.",
            data=event,
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )))

    await commit_batch(session, operations)
    await session.refresh(appointment)

    logger.info("Appointment %s cancelled by clinic %s (was %s)", appointment.id, clinic.id, observed.value)
    return MatchActionResponse(
        success=True,
        message=GlobalMessages.MATCH_CANCELLED,
        appointment=build_appointment_response(appointment)
    )


async def complete_donation(
    session: AsyncSession,
    clinic: Clinic,
    appointment_id: UUID,
    now: Optional[datetime] = None
) -> MatchActionResponse:
    """Record that a confirmed donation took place."""
    now = now or utc_now()

    appointment = await _get_clinic_appointment(session, clinic, appointment_id)
    if appointment.status != DBMatchStatus.CONFIRMED:
        raise AlreadyResolved(GlobalMessages.MATCH_ALREADY_RESOLVED)

    donor = await session.get(Donor, appointment.donor_id)
    # A donation completed ahead of its slot happened today
    donation_date = min(appointment.appointment_date or now.date(), now.date())

    await commit_batch(session, [
        UpdateIf(
            DonorAppointment,
            appointment.id,
            {"status": DBMatchStatus.CONFIRMED},
            {"status": DBMatchStatus.COMPLETED, "completed_at": now},
            message=GlobalMessages.MATCH_ALREADY_RESOLVED
        ),
        Increment(Donor, donor.id, {"donation_count": 1}),
        Update(Donor, donor.id, {"last_donation": donation_date}),
        Insert(notifications_service.build_notification(
            user_id=donor.user_id,
            user_role=UserRole.DONOR,
            notification_type=NotificationType.DONATION_COMPLETED,
            title="Thank You for Donating",
            message=f"{donor.dog_name}'s donation has been recorded. Thank you for saving a life!",
            data={"appointmentId": str(appointment.id), "donationDate": donation_date.isoformat()},
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
    ])
    await session.refresh(appointment)

    logger.info("Donation %s completed at clinic %s", appointment.id, clinic.id)
    return MatchActionResponse(
        success=True,
        message=GlobalMessages.DONATION_COMPLETED,
        appointment=build_appointment_response(appointment)
    )


# ============================================================================
# COUNTERS
# ============================================================================

async def get_match_counters(session: AsyncSession, patient_id: UUID) -> MatchCountersResponse:
    """Compare the request's stored counters with its appointments."""
    patient = await load_fresh(session, Patient, patient_id)
    if not patient:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)

    result = await session.execute(
        select(DonorAppointment.status, func.count(DonorAppointment.id))
        .where(DonorAppointment.linked_patient_id == patient.id)
        .group_by(DonorAppointment.status)
    )
    counts = {status: count for status, count in result.all()}

    active_pending = counts.get(DBMatchStatus.PENDING_DONOR_ACCEPTANCE, 0)
    active_confirmed = counts.get(DBMatchStatus.CONFIRMED, 0) + counts.get(DBMatchStatus.COMPLETED, 0)

    return MatchCountersResponse(
        patient_id=patient.id,
        pending_matches=patient.pending_matches,
        confirmed_matches=patient.confirmed_matches,
        active_pending=active_pending,
        active_confirmed=active_confirmed,
        consistent=(
            patient.pending_matches == active_pending
            and patient.confirmed_matches == active_confirmed
        )
    )


# ============================================================================
# APPOINTMENT LISTS
# ============================================================================

async def list_appointments(
    session: AsyncSession,
    owner_criterion,
    status: Optional[str] = None
) -> DonorAppointmentListResponse:
    """Appointments matching ``owner_criterion``, newest match first.

    ``status`` is a ``MatchStatus`` value or ``all``.
    """
    query = select(DonorAppointment).where(owner_criterion)

    if status and status != "all":
        try:
            db_status = DBMatchStatus(MatchStatus(status).value)
        except ValueError:
            raise ValidationError(f"Unknown appointment status: {status}")
        query = query.where(DonorAppointment.status == db_status)

    query = query.order_by(desc(DonorAppointment.matched_at)).execution_options(populate_existing=True)

    result = await session.execute(query)
    appointments = result.scalars().all()

    return DonorAppointmentListResponse(
        appointments=[build_appointment_response(a) for a in appointments],
        total=len(appointments)
    )
