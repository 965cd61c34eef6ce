# src/modules/matching/schemas.py
"""Matching module Pydantic schemas."""

from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class MatchStatus(str, Enum):
    PENDING_DONOR_ACCEPTANCE = "pending_donor_acceptance"
    CONFIRMED = "confirmed"
    REJECTED_BY_DONOR = "rejected_by_donor"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EligibilityReason(str, Enum):
    ELIGIBLE = "eligible"
    WAIT_PERIOD = "wait_period"
    MEDICAL_CONDITION = "medical_condition"
    UNDERWEIGHT = "underweight"


class CandidateSort(str, Enum):
    DISTANCE = "distance"
    BEST_MATCH = "best_match"
    EXPERIENCE = "experience"


# ============================================================================
# ELIGIBILITY
# ============================================================================

class EligibilityStatus(BaseModel):
    """Outcome of the eligibility check for one donor."""
    is_eligible: bool
    is_fit: bool
    reason: EligibilityReason
    last_donation: Optional[date] = None
    next_eligible_date: Optional[date] = None


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class MatchCreateRequest(BaseModel):
    """Link a donor to a blood request."""
    donor_id: UUID
    notes: Optional[str] = Field(default=None, max_length=1000)


class MatchCancelRequest(BaseModel):
    """Cancel a reservation or a confirmed appointment."""
    reason: Optional[str] = None


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class DonorCandidate(BaseModel):
    """A donor with the blood type of the request, annotated for the clinic."""
    donor_id: UUID
    dog_name: str
    breed: Optional[str] = None
    city: Optional[str] = None
    blood_type: str
    weight_kg: Optional[float] = None
    donation_count: int
    last_donation: Optional[date] = None
    is_eligible: bool
    is_fit: bool
    eligibility_reason: EligibilityReason
    next_eligible_date: Optional[date] = None
    is_same_city: bool
    distance: int
    already_linked: bool
    match_score: int


class CandidateListResponse(BaseModel):
    """Ranked candidates for one blood request."""
    patient_id: UUID
    blood_type: str
    urgency: str
    sort_by: CandidateSort
    candidates: List[DonorCandidate]
    total: int


class DonorAppointmentResponse(BaseModel):
    """Full donor appointment details."""
    id: UUID
    donor_id: UUID
    linked_patient_id: UUID
    clinic_id: UUID
    status: MatchStatus
    match_score: Optional[int] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    notes: Optional[str] = None
    matched_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DonorAppointmentListResponse(BaseModel):
    """List of donor appointments."""
    appointments: List[DonorAppointmentResponse]
    total: int


class MatchActionResponse(BaseModel):
    """Generic response for match actions."""
    success: bool
    message: str
    appointment: Optional[DonorAppointmentResponse] = None


class MatchCountersResponse(BaseModel):
    """Stored request counters next to the values recomputed from appointments."""
    patient_id: UUID
    pending_matches: int
    confirmed_matches: int
    active_pending: int
    active_confirmed: int
    consistent: bool
