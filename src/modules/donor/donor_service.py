# src/modules/donor/donor_service.py
"""Donor responses to matches and the donor dashboard."""

import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func, desc, case
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.batch import Increment, Insert, Update, UpdateIf, UpdateWhere, commit_batch
from src.common.utils.errors import AlreadyResolved, NotFound, ValidationError
from src.common.utils.global_functions import utc_now
from src.common.utils.global_messages import GlobalMessages
from src.models.models import (
    Clinic, Donor, DonorAppointment, Patient,
    MatchStatus as DBMatchStatus, NotificationType, RequestStatus, UserRole,
    URGENT_LEVELS
)
from src.modules.matching.eligibility import evaluate_eligibility
from src.modules.matching.matching_service import (
    REFERENCE_TYPE, OPEN_REQUEST_STATUSES,
    build_appointment_response, list_appointments, load_fresh, mark_match_notification_read
)
from src.modules.matching.schemas import (
    DonorAppointmentListResponse, EligibilityStatus, MatchActionResponse
)
from src.modules.notifications import notifications_service
from src.modules.requests.requests_service import build_request_response
from src.modules.requests.schemas import BloodRequestListResponse
from .schemas import DonorStatsResponse

logger = logging.getLogger(__name__)

LIVES_SAVED_PER_DONATION = 3

# Feed sizes for the dashboard: a short urgent strip, a longer full list
URGENT_FEED_LIMIT = 6
FEED_LIMIT = 20


async def _get_pending_appointment(
    session: AsyncSession,
    donor: Donor,
    appointment_id: UUID
) -> DonorAppointment:
    """Fresh read of the donor's reservation; the first response wins."""
    appointment = await load_fresh(session, DonorAppointment, appointment_id)
    if not appointment or appointment.donor_id != donor.id:
        raise NotFound(GlobalMessages.APPOINTMENT_NOT_FOUND)
    if appointment.status != DBMatchStatus.PENDING_DONOR_ACCEPTANCE:
        logger.warning(
            "Donor %s responded to appointment %s already in status %s",
            donor.id, appointment.id, appointment.status.value
        )
        raise AlreadyResolved(GlobalMessages.MATCH_ALREADY_RESOLVED)
    return appointment


# ============================================================================
# MATCH RESPONSES
# ============================================================================

async def accept_match(
    session: AsyncSession,
    donor: Donor,
    appointment_id: UUID,
    appointment_date: Optional[date],
    appointment_time: Optional[str] = None,
    now: Optional[datetime] = None
) -> MatchActionResponse:
    """Confirm a reservation for the chosen date and time.

    Other reservations still open for the same request are left for the
    clinic to cancel.
    """
    now = now or utc_now()
    if appointment_date is None:
        raise ValidationError(GlobalMessages.APPOINTMENT_DATE_REQUIRED)
    if appointment_date < now.date():
        raise ValidationError(GlobalMessages.APPOINTMENT_DATE_IN_PAST)

    appointment = await _get_pending_appointment(session, donor, appointment_id)
    patient = await session.get(Patient, appointment.linked_patient_id)
    clinic = await session.get(Clinic, appointment.clinic_id)

    time_label = (appointment_time or "").strip() or "TBD"
    date_label = appointment_date.strftime("%B %d, %Y")
    event = {
        "appointmentId": str(appointment.id),
        "appointmentDate": appointment_date.isoformat(),
        "appointmentTime": time_label,
    }

    await commit_batch(session, [
        UpdateIf(
            DonorAppointment,
            appointment.id,
            {"status": DBMatchStatus.PENDING_DONOR_ACCEPTANCE},
            {
                "status": DBMatchStatus.CONFIRMED,
                "appointment_date": appointment_date,
                "appointment_time": time_label,
                "accepted_at": now,
                "accepted_by": donor.user_id,
            },
            message=GlobalMessages.MATCH_ALREADY_RESOLVED
        ),
        mark_match_notification_read(appointment, donor, now),
        Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.APPOINTMENT_CONFIRMED,
            title="Appointment Confirmed!",
            message=f"Your blood transfusion appointment has been scheduled for {date_label} at {time_label}.",
            data=event,
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
        Insert(notifications_service.build_notification(
            user_id=clinic.user_id,
            user_role=UserRole.CLINIC,
            notification_type=NotificationType.APPOINTMENT_CONFIRMED,
            title="Donor Accepted Match",
            message=f"{donor.dog_name} accepted the blood request. Appointment: {date_label} at {time_label}.",
            data={**event, "donorId": str(donor.id), "patientId": str(patient.id)},
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
        Increment(Patient, patient.id, {"pending_matches": -1, "confirmed_matches": 1}),
        Update(Patient, patient.id, {"appointment_date": appointment_date}),
        UpdateWhere(
            Patient,
            [Patient.id == patient.id, Patient.request_status.in_(OPEN_REQUEST_STATUSES)],
            {"request_status": RequestStatus.ACCEPTED}
        ),
    ])
    await session.refresh(appointment)

    logger.info("Donor %s accepted appointment %s for %s", donor.id, appointment.id, appointment_date)
    return MatchActionResponse(
        success=True,
        message=GlobalMessages.MATCH_ACCEPTED,
        appointment=build_appointment_response(appointment)
    )


async def decline_match(
    session: AsyncSession,
    donor: Donor,
    appointment_id: UUID,
    now: Optional[datetime] = None
) -> MatchActionResponse:
    """Decline a reservation. The request stays open for another donor."""
    now = now or utc_now()

    appointment = await _get_pending_appointment(session, donor, appointment_id)
    patient = await session.get(Patient, appointment.linked_patient_id)

    await commit_batch(session, [
        UpdateIf(
            DonorAppointment,
            appointment.id,
            {"status": DBMatchStatus.PENDING_DONOR_ACCEPTANCE},
            {
                "status": DBMatchStatus.REJECTED_BY_DONOR,
                "rejected_at": now,
                "rejected_by": donor.user_id,
            },
            message=GlobalMessages.MATCH_ALREADY_RESOLVED
        ),
        mark_match_notification_read(appointment, donor, now),
        # Generic on purpose: nothing about the donor reaches the patient
        Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.DONOR_DECLINED,
            title="Match Update",
            message="A donor was unable to proceed. The clinic is finding another match for you.",
            data={"appointmentId": str(appointment.id)},
            reference_id=appointment.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
        Increment(Patient, patient.id, {"pending_matches": -1}),
    ])
    await session.refresh(appointment)

    logger.info("Donor %s declined appointment %s", donor.id, appointment.id)
    return MatchActionResponse(
        success=True,
        message=GlobalMessages.MATCH_DECLINED,
        appointment=build_appointment_response(appointment)
    )


# ============================================================================
# DASHBOARD
# ============================================================================

def get_donor_eligibility(donor: Donor, now: Optional[datetime] = None) -> EligibilityStatus:
    """Eligibility of the donor right now."""
    return evaluate_eligibility(donor, now or utc_now())


async def get_donor_stats(
    session: AsyncSession,
    donor: Donor,
    now: Optional[datetime] = None
) -> DonorStatsResponse:
    """Donation totals, eligibility and reservations waiting for an answer."""
    result = await session.execute(
        select(DonorAppointment.status, func.count(DonorAppointment.id))
        .where(DonorAppointment.donor_id == donor.id)
        .group_by(DonorAppointment.status)
    )
    counts = {status: count for status, count in result.all()}

    total_donations = donor.donation_count or counts.get(DBMatchStatus.COMPLETED, 0)

    return DonorStatsResponse(
        total_donations=total_donations,
        lives_saved=total_donations * LIVES_SAVED_PER_DONATION,
        last_donation=donor.last_donation,
        eligibility=get_donor_eligibility(donor, now),
        pending_requests=counts.get(DBMatchStatus.PENDING_DONOR_ACCEPTANCE, 0)
    )


async def get_donor_appointments(
    session: AsyncSession,
    donor: Donor,
    status: Optional[str] = None
) -> DonorAppointmentListResponse:
    """Donor's appointments, newest match first, optionally filtered by status."""
    return await list_appointments(session, DonorAppointment.donor_id == donor.id, status)


async def list_requests_for_donor(
    session: AsyncSession,
    donor: Donor,
    only_urgent: bool = True
) -> BloodRequestListResponse:
    """Open requests the donor's blood type can serve, same city first."""
    limit = URGENT_FEED_LIMIT if only_urgent else FEED_LIMIT

    query = select(Patient).where(
        Patient.request_status.in_(OPEN_REQUEST_STATUSES),
        Patient.blood_type == donor.blood_type
    )
    if only_urgent:
        query = query.where(Patient.urgency.in_(URGENT_LEVELS))
    if donor.city:
        same_city = case((func.lower(func.trim(Patient.city)) == donor.city.strip().lower(), 0), else_=1)
        query = query.order_by(same_city)

    query = (
        query.order_by(desc(Patient.created_at), Patient.id)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(query)
    patients = result.scalars().all()

    return BloodRequestListResponse(
        requests=[build_request_response(p) for p in patients],
        total=len(patients),
        page=1,
        per_page=limit
    )
