# src/modules/requests/schemas.py
"""Blood request module Pydantic schemas."""

from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class UrgencyLevel(str, Enum):
    IMMEDIATE = "immediate"
    WITHIN_24_HOURS = "within_24_hours"
    WITHIN_3_DAYS = "within_3_days"
    NO_RUSH = "no_rush"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class RequestCategory(str, Enum):
    ALL = "all"
    URGENT = "urgent"
    REGULAR = "regular"


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class RequestRejectBody(BaseModel):
    """Reason shown to the patient when a clinic rejects a request."""
    reason: Optional[str] = Field(default=None, max_length=500)


class CaseCompleteBody(BaseModel):
    """Clinic notes stored when a case is closed."""
    notes: Optional[str] = None


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class BloodRequestResponse(BaseModel):
    """A patient's blood request."""
    id: UUID
    dog_name: str
    breed: Optional[str] = None
    city: Optional[str] = None
    blood_type: str
    weight_kg: Optional[float] = None
    urgency: UrgencyLevel
    quantity_needed: Optional[str] = None
    reason: Optional[str] = None
    request_status: RequestStatus
    pending_matches: int
    confirmed_matches: int
    assigned_clinic_id: Optional[UUID] = None
    appointment_date: Optional[date] = None
    request_expires: Optional[datetime] = None
    case_notes: Optional[str] = None
    completed_date: Optional[date] = None

    class Config:
        from_attributes = True


class BloodRequestListResponse(BaseModel):
    """Paginated list of blood requests."""
    requests: List[BloodRequestResponse]
    total: int
    page: int = 1
    per_page: int = 20


class RequestActionResponse(BaseModel):
    """Generic response for clinic actions on a request."""
    success: bool
    message: str
    request: Optional[BloodRequestResponse] = None
