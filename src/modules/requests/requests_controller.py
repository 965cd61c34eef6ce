# src/modules/requests/requests_controller.py
"""Blood request controller with API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.common.utils.errors import MatchingError
from src.common.utils.global_functions import to_http_exception
from src.auth.dependencies import get_current_clinic, get_current_patient
from src.models.models import Clinic, Patient
from src.modules.matching.schemas import DonorAppointmentListResponse

from . import requests_service as service
from .schemas import (
    BloodRequestListResponse, BloodRequestResponse, CaseCompleteBody,
    RequestActionResponse, RequestCategory, RequestRejectBody
)

router = APIRouter(prefix="/requests", tags=["Blood Requests"])


# ============================================================================
# LISTINGS
# ============================================================================

@router.get("", response_model=BloodRequestListResponse)
async def list_open_requests(
    category: RequestCategory = Query(RequestCategory.ALL, description="all, urgent or regular"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Open requests waiting for a clinic."""
    return await service.list_open_requests(db, category, page, per_page)


@router.get("/cases", response_model=BloodRequestListResponse)
async def list_clinic_cases(
    status: str = Query("accepted", description="accepted or completed"),
    category: RequestCategory = Query(RequestCategory.ALL),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """The clinic's own cases."""
    try:
        return await service.list_clinic_cases(db, current_clinic, status, category, page, per_page)
    except MatchingError as e:
        raise to_http_exception(e)


@router.get("/me", response_model=BloodRequestResponse)
async def get_my_request(
    db: AsyncSession = Depends(get_db_session),
    current_patient: Patient = Depends(get_current_patient)
):
    """The patient's own blood request."""
    try:
        return await service.get_patient_request(db, current_patient)
    except MatchingError as e:
        raise to_http_exception(e)


@router.get("/me/appointments", response_model=DonorAppointmentListResponse)
async def get_my_appointments(
    status: Optional[str] = Query(None, description="Filter by status, e.g. completed for the donation history"),
    db: AsyncSession = Depends(get_db_session),
    current_patient: Patient = Depends(get_current_patient)
):
    try:
        return await service.get_patient_appointments(db, current_patient, status)
    except MatchingError as e:
        raise to_http_exception(e)


@router.get("/{patient_id}", response_model=BloodRequestResponse)
async def get_request(
    patient_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    try:
        return await service.get_request(db, patient_id)
    except MatchingError as e:
        raise to_http_exception(e)


# ============================================================================
# CASE ACTIONS
# ============================================================================

@router.post("/{patient_id}/reject", response_model=RequestActionResponse)
async def reject_request(
    patient_id: UUID,
    request: Optional[RequestRejectBody] = None,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Reject a pending request."""
    try:
        reason = request.reason if request else None
        return await service.reject_request(db, current_clinic, patient_id, reason)
    except MatchingError as e:
        raise to_http_exception(e)


@router.post("/{patient_id}/complete", response_model=RequestActionResponse)
async def complete_case(
    patient_id: UUID,
    request: Optional[CaseCompleteBody] = None,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Mark an accepted case as completed."""
    try:
        notes = request.notes if request else None
        return await service.complete_case(db, current_clinic, patient_id, notes)
    except MatchingError as e:
        raise to_http_exception(e)


@router.post("/{patient_id}/cancel", response_model=RequestActionResponse)
async def cancel_case(
    patient_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Release an accepted case back to the open pool."""
    try:
        return await service.cancel_case(db, current_clinic, patient_id)
    except MatchingError as e:
        raise to_http_exception(e)
