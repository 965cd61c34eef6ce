# src/modules/matching/matching_controller.py
"""Matching controller with clinic-facing API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.common.utils.errors import MatchingError
from src.common.utils.global_functions import to_http_exception
from src.auth.dependencies import get_current_clinic
from src.models.models import Clinic

from . import candidates_service, matching_service as service
from .schemas import (
    CandidateListResponse, CandidateSort, MatchActionResponse,
    MatchCancelRequest, MatchCountersResponse, MatchCreateRequest
)

router = APIRouter(prefix="/matching", tags=["Matching"])


# ============================================================================
# CANDIDATE SEARCH
# ============================================================================

@router.get("/requests/{patient_id}/candidates", response_model=CandidateListResponse)
async def get_candidates(
    patient_id: UUID,
    sort_by: CandidateSort = Query(CandidateSort.BEST_MATCH, description="Sort by: distance, best_match, experience"),
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """List donors with the request's blood type, ranked for the clinic."""
    try:
        return await candidates_service.find_candidates(db, patient_id, current_clinic, sort_by)
    except MatchingError as e:
        raise to_http_exception(e)


@router.get("/requests/{patient_id}/counters", response_model=MatchCountersResponse)
async def get_counters(
    patient_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Stored match counters of a request next to the recomputed values."""
    try:
        return await service.get_match_counters(db, patient_id)
    except MatchingError as e:
        raise to_http_exception(e)


# ============================================================================
# MATCH LIFECYCLE
# ============================================================================

@router.post("/requests/{patient_id}/matches", response_model=MatchActionResponse, status_code=201)
async def create_match(
    patient_id: UUID,
    request: MatchCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Link a donor to a blood request and notify both sides."""
    try:
        return await service.create_match(db, current_clinic, patient_id, request.donor_id, request.notes)
    except MatchingError as e:
        raise to_http_exception(e)


@router.post("/appointments/{appointment_id}/cancel", response_model=MatchActionResponse)
async def cancel_match(
    appointment_id: UUID,
    request: Optional[MatchCancelRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Cancel a reservation or a confirmed appointment."""
    reason = request.reason if request else None
    try:
        return await service.cancel_match(db, current_clinic, appointment_id, reason)
    except MatchingError as e:
        raise to_http_exception(e)


@router.post("/appointments/{appointment_id}/complete", response_model=MatchActionResponse)
async def complete_donation(
    appointment_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_clinic: Clinic = Depends(get_current_clinic)
):
    """Mark a confirmed donation as completed."""
    try:
        return await service.complete_donation(db, current_clinic, appointment_id)
    except MatchingError as e:
        raise to_http_exception(e)
