# src/modules/donor/schemas.py
"""Donor module Pydantic schemas."""

from typing import Optional
from datetime import date
from pydantic import BaseModel, Field

from src.modules.matching.schemas import EligibilityStatus


class MatchAcceptRequest(BaseModel):
    """Donor's answer to a match, with the chosen appointment slot."""
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = Field(default=None, max_length=20)


class DonorStatsResponse(BaseModel):
    """Donor dashboard summary."""
    total_donations: int
    lives_saved: int
    last_donation: Optional[date] = None
    eligibility: EligibilityStatus
    pending_requests: int
