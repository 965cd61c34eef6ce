# src/modules/donor/donor_controller.py
"""Donor controller with API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.common.utils.errors import MatchingError
from src.common.utils.global_functions import to_http_exception
from src.auth.dependencies import get_current_donor
from src.models.models import Donor
from src.modules.matching.schemas import (
    DonorAppointmentListResponse, EligibilityStatus, MatchActionResponse
)
from src.modules.requests.schemas import BloodRequestListResponse

from . import donor_service as service
from .schemas import DonorStatsResponse, MatchAcceptRequest

router = APIRouter(prefix="/donor", tags=["Donor"])


@router.get("/eligibility", response_model=EligibilityStatus)
async def get_eligibility(
    current_donor: Donor = Depends(get_current_donor)
):
    """Whether the donor can donate today, and when they can next if not."""
    return service.get_donor_eligibility(current_donor)


@router.get("/stats", response_model=DonorStatsResponse)
async def get_stats(
    db: AsyncSession = Depends(get_db_session),
    current_donor: Donor = Depends(get_current_donor)
):
    """Donor dashboard summary."""
    return await service.get_donor_stats(db, current_donor)


@router.get("/appointments", response_model=DonorAppointmentListResponse)
async def get_appointments(
    status: Optional[str] = Query(None, description="Filter by status: all, pending_donor_acceptance, confirmed, rejected_by_donor, completed, cancelled"),
    db: AsyncSession = Depends(get_db_session),
    current_donor: Donor = Depends(get_current_donor)
):
    """Get the donor's appointments."""
    try:
        return await service.get_donor_appointments(db, current_donor, status)
    except MatchingError as e:
        raise to_http_exception(e)


@router.get("/requests", response_model=BloodRequestListResponse)
async def get_requests(
    only_urgent: bool = True,
    db: AsyncSession = Depends(get_db_session),
    current_donor: Donor = Depends(get_current_donor)
):
    """Open requests matching the donor's blood type, nearest first."""
    return await service.list_requests_for_donor(db, current_donor, only_urgent)


@router.post("/appointments/{appointment_id}/accept", response_model=MatchActionResponse)
async def accept_match(
    appointment_id: UUID,
    request: MatchAcceptRequest,
    db: AsyncSession = Depends(get_db_session),
    current_donor: Donor = Depends(get_current_donor)
):
    """Accept a match and pick the appointment slot. First response wins."""
    try:
        return await service.accept_match(
            db, current_donor, appointment_id, request.appointment_date, request.appointment_time
        )
    except MatchingError as e:
        raise to_http_exception(e)


@router.post("/appointments/{appointment_id}/decline", response_model=MatchActionResponse)
async def decline_match(
    appointment_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_donor: Donor = Depends(get_current_donor)
):
    """Decline a match."""
    try:
        return await service.decline_match(db, current_donor, appointment_id)
    except MatchingError as e:
        raise to_http_exception(e)
