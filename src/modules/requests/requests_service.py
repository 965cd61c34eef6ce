# src/modules/requests/requests_service.py
"""Blood request listings and the clinic's case actions."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func, desc, case
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.batch import Insert, UpdateIf, commit_batch
from src.common.utils.errors import AlreadyResolved, NotFound, ValidationError
from src.common.utils.global_functions import utc_now
from src.common.utils.global_messages import GlobalMessages
from src.models.models import (
    Clinic, DonorAppointment, Patient,
    MatchStatus as DBMatchStatus, NotificationType,
    RequestStatus as DBRequestStatus, UrgencyLevel as DBUrgencyLevel, UserRole,
    URGENT_LEVELS, REGULAR_LEVELS
)
from src.modules.matching.matching_service import list_appointments, load_fresh
from src.modules.matching.schemas import DonorAppointmentListResponse
from src.modules.notifications import notifications_service
from .schemas import (
    BloodRequestListResponse, BloodRequestResponse, RequestActionResponse,
    RequestCategory, RequestStatus, UrgencyLevel
)

logger = logging.getLogger(__name__)

REFERENCE_TYPE = "blood_request"

CASE_STATUSES = {
    "accepted": DBRequestStatus.ACCEPTED,
    "completed": DBRequestStatus.COMPLETED,
}


def build_request_response(patient: Patient) -> BloodRequestResponse:
    """Convert a patient row to its blood request schema."""
    return BloodRequestResponse(
        id=patient.id,
        dog_name=patient.dog_name,
        breed=patient.breed,
        city=patient.city,
        blood_type=patient.blood_type,
        weight_kg=patient.weight_kg,
        urgency=UrgencyLevel(patient.urgency.value),
        quantity_needed=patient.quantity_needed,
        reason=patient.reason,
        request_status=RequestStatus(patient.request_status.value),
        pending_matches=patient.pending_matches,
        confirmed_matches=patient.confirmed_matches,
        assigned_clinic_id=patient.assigned_clinic_id,
        appointment_date=patient.appointment_date,
        request_expires=patient.request_expires,
        case_notes=patient.case_notes,
        completed_date=patient.completed_date
    )


def _apply_category(query, category: Optional[RequestCategory]):
    """Filter by urgency class and order the way the clinic tabs show it."""
    if category == RequestCategory.URGENT:
        immediate_first = case((Patient.urgency == DBUrgencyLevel.IMMEDIATE, 0), else_=1)
        return (
            query.where(Patient.urgency.in_(URGENT_LEVELS))
            .order_by(immediate_first, desc(Patient.created_at), Patient.id)
        )
    if category == RequestCategory.REGULAR:
        query = query.where(Patient.urgency.in_(REGULAR_LEVELS))
    return query.order_by(desc(Patient.created_at), Patient.id)


async def _paginate(session: AsyncSession, query, page: int, per_page: int) -> BloodRequestListResponse:
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_result = await session.execute(count_query)
    total = total_result.scalar() or 0

    query = (
        query.offset((page - 1) * per_page)
        .limit(per_page)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(query)
    patients = result.scalars().all()

    return BloodRequestListResponse(
        requests=[build_request_response(p) for p in patients],
        total=total,
        page=page,
        per_page=per_page
    )


async def _get_clinic_case(session: AsyncSession, clinic: Clinic, patient_id: UUID) -> Patient:
    patient = await load_fresh(session, Patient, patient_id)
    if not patient or patient.assigned_clinic_id != clinic.id:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)
    if patient.request_status != DBRequestStatus.ACCEPTED:
        raise AlreadyResolved(GlobalMessages.REQUEST_NOT_OPEN)
    return patient


# ============================================================================
# LISTINGS
# ============================================================================

async def list_open_requests(
    session: AsyncSession,
    category: Optional[RequestCategory] = None,
    page: int = 1,
    per_page: int = 20
) -> BloodRequestListResponse:
    """Pending requests no clinic has taken yet."""
    query = select(Patient).where(Patient.request_status == DBRequestStatus.PENDING)
    query = _apply_category(query, category)
    return await _paginate(session, query, page, per_page)


async def list_clinic_cases(
    session: AsyncSession,
    clinic: Clinic,
    status: str = "accepted",
    category: Optional[RequestCategory] = None,
    page: int = 1,
    per_page: int = 20
) -> BloodRequestListResponse:
    """The clinic's accepted or completed cases."""
    db_status = CASE_STATUSES.get(status)
    if db_status is None:
        raise ValidationError(GlobalMessages.CASE_STATUS_INVALID)

    query = select(Patient).where(
        Patient.assigned_clinic_id == clinic.id,
        Patient.request_status == db_status
    )
    query = _apply_category(query, category)
    return await _paginate(session, query, page, per_page)


async def get_patient_appointments(
    session: AsyncSession,
    patient: Patient,
    status: Optional[str] = None
) -> DonorAppointmentListResponse:
    """Appointments linked to the patient's request; ``completed`` gives the history."""
    return await list_appointments(session, DonorAppointment.linked_patient_id == patient.id, status)


async def get_request(session: AsyncSession, patient_id: UUID) -> BloodRequestResponse:
    patient = await load_fresh(session, Patient, patient_id)
    if not patient:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)
    return build_request_response(patient)


async def get_patient_request(session: AsyncSession, patient: Patient) -> BloodRequestResponse:
    """The caller's own request with its current counters."""
    return await get_request(session, patient.id)


# ============================================================================
# CASE ACTIONS
# ============================================================================

async def reject_request(
    session: AsyncSession,
    clinic: Clinic,
    patient_id: UUID,
    reason: Optional[str] = None,
    now: Optional[datetime] = None
) -> RequestActionResponse:
    """Turn down a pending request."""
    now = now or utc_now()

    patient = await load_fresh(session, Patient, patient_id)
    if not patient:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)
    if patient.request_status != DBRequestStatus.PENDING:
        raise AlreadyResolved(GlobalMessages.REQUEST_NOT_OPEN)
    if patient.assigned_clinic_id is not None and patient.assigned_clinic_id != clinic.id:
        raise AlreadyResolved(GlobalMessages.REQUEST_ASSIGNED_ELSEWHERE)

    message = f"{clinic.name} is unable to take {patient.dog_name}'s blood request."
    if reason:
        message = f"{message} Reason: {reason}"

    await commit_batch(session, [
        UpdateIf(
            Patient,
            patient.id,
            {"request_status": DBRequestStatus.PENDING},
            {"request_status": DBRequestStatus.REJECTED, "assigned_clinic_id": None},
            message=GlobalMessages.REQUEST_NOT_OPEN
        ),
        Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.REQUEST_REJECTED,
            title="Blood Request Update",
            message=message,
            data={"patientId": str(patient.id), "clinicId": str(clinic.id), "reason": reason},
            reference_id=patient.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
    ])
    await session.refresh(patient)

    logger.info("Request %s rejected by clinic %s", patient.id, clinic.id)
    return RequestActionResponse(
        success=True,
        message=GlobalMessages.REQUEST_REJECTED,
        request=build_request_response(patient)
    )


async def complete_case(
    session: AsyncSession,
    clinic: Clinic,
    patient_id: UUID,
    notes: Optional[str] = None,
    now: Optional[datetime] = None
) -> RequestActionResponse:
    """Close an accepted case."""
    now = now or utc_now()
    patient = await _get_clinic_case(session, clinic, patient_id)

    await commit_batch(session, [
        UpdateIf(
            Patient,
            patient.id,
            {"request_status": DBRequestStatus.ACCEPTED, "assigned_clinic_id": clinic.id},
            {
                "request_status": DBRequestStatus.COMPLETED,
                "case_notes": notes,
                "completed_date": now.date(),
            },
            message=GlobalMessages.REQUEST_NOT_OPEN
        ),
        Insert(notifications_service.build_notification(
            user_id=patient.user_id,
            user_role=UserRole.PATIENT,
            notification_type=NotificationType.CASE_COMPLETED,
            title="Case Completed",
            message=f"{clinic.name} has closed {patient.dog_name}'s case. We hope they feel better soon!",
            data={"patientId": str(patient.id), "clinicId": str(clinic.id)},
            reference_id=patient.id,
            reference_type=REFERENCE_TYPE,
            created_at=now
        )),
    ])
    await session.refresh(patient)

    logger.info("Case %s completed by clinic %s", patient.id, clinic.id)
    return RequestActionResponse(
        success=True,
        message=GlobalMessages.CASE_COMPLETED,
        request=build_request_response(patient)
    )


async def cancel_case(
    session: AsyncSession,
    clinic: Clinic,
    patient_id: UUID
) -> RequestActionResponse:
    """Hand an accepted case back to the open pool.

    Only allowed once the clinic has no pending or confirmed appointment
    left on the request.
    """
    patient = await _get_clinic_case(session, clinic, patient_id)

    result = await session.execute(
        select(func.count(DonorAppointment.id)).where(
            DonorAppointment.linked_patient_id == patient.id,
            DonorAppointment.status.in_((DBMatchStatus.PENDING_DONOR_ACCEPTANCE, DBMatchStatus.CONFIRMED))
        )
    )
    if result.scalar() or patient.pending_matches:
        raise ValidationError(GlobalMessages.CASE_HAS_ACTIVE_MATCHES)

    await commit_batch(session, [
        UpdateIf(
            Patient,
            patient.id,
            {
                "request_status": DBRequestStatus.ACCEPTED,
                "assigned_clinic_id": clinic.id,
                "pending_matches": 0,
            },
            {
                "request_status": DBRequestStatus.PENDING,
                "assigned_clinic_id": None,
                "appointment_date": None,
            },
            message=GlobalMessages.REQUEST_NOT_OPEN
        ),
    ])
    await session.refresh(patient)

    logger.info("Case %s released by clinic %s", patient.id, clinic.id)
    return RequestActionResponse(
        success=True,
        message=GlobalMessages.CASE_CANCELLED,
        request=build_request_response(patient)
    )
