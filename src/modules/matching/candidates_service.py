# src/modules/matching/candidates_service.py
"""Donor candidate search for a blood request."""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.config import settings
from src.common.utils.errors import NotFound
from src.common.utils.global_functions import utc_now
from src.common.utils.global_messages import GlobalMessages
from src.models.models import (
    Clinic, Donor, DonorAppointment, Patient, LINKED_MATCH_STATUSES
)
from .eligibility import evaluate_eligibility
from .scoring import calculate_match_score, is_same_city, is_urgent
from .schemas import CandidateListResponse, CandidateSort, DonorCandidate


def _build_candidate(
    donor: Donor,
    reference_city: Optional[str],
    urgent: bool,
    linked_donor_ids: set,
    now: datetime
) -> DonorCandidate:
    eligibility = evaluate_eligibility(donor, now)
    same_city = is_same_city(donor.city, reference_city)

    return DonorCandidate(
        donor_id=donor.id,
        dog_name=donor.dog_name,
        breed=donor.breed,
        city=donor.city,
        blood_type=donor.blood_type,
        weight_kg=donor.weight_kg,
        donation_count=donor.donation_count or 0,
        last_donation=donor.last_donation,
        is_eligible=eligibility.is_eligible,
        is_fit=eligibility.is_fit,
        eligibility_reason=eligibility.reason,
        next_eligible_date=eligibility.next_eligible_date,
        is_same_city=same_city,
        distance=0 if same_city else 1,
        already_linked=donor.id in linked_donor_ids,
        match_score=calculate_match_score(
            eligibility.is_eligible,
            eligibility.is_fit,
            same_city,
            urgent,
            donor.donation_count
        )
    )


def sort_candidates(candidates: List[DonorCandidate], sort_by: CandidateSort) -> List[DonorCandidate]:
    """Order candidates for display. Sorting is stable, ties keep query order."""
    if sort_by == CandidateSort.DISTANCE:
        return sorted(candidates, key=lambda c: (c.distance, -c.match_score))
    if sort_by == CandidateSort.EXPERIENCE:
        return sorted(candidates, key=lambda c: -c.donation_count)
    return sorted(candidates, key=lambda c: -c.match_score)


async def find_candidates(
    session: AsyncSession,
    patient_id: UUID,
    clinic: Optional[Clinic] = None,
    sort_by: CandidateSort = CandidateSort.BEST_MATCH,
    now: Optional[datetime] = None,
    limit: Optional[int] = None
) -> CandidateListResponse:
    """List donors whose blood type matches the request.

    Eligibility and fitness are annotations only. Ineligible donors stay in
    the list so a clinic can still reach them during a shortage.
    """
    now = now or utc_now()

    patient = await session.get(Patient, patient_id)
    if not patient:
        raise NotFound(GlobalMessages.REQUEST_NOT_FOUND)

    donors_result = await session.execute(
        select(Donor)
        .where(Donor.blood_type == patient.blood_type)
        .order_by(Donor.dog_name, Donor.id)
    )
    donors = donors_result.scalars().all()

    linked_result = await session.execute(
        select(DonorAppointment.donor_id)
        .where(DonorAppointment.linked_patient_id == patient.id)
        .where(DonorAppointment.status.in_(LINKED_MATCH_STATUSES))
    )
    linked_donor_ids = set(linked_result.scalars().all())

    # Distance is measured to the clinic doing the search
    reference_city = clinic.city if clinic and clinic.city else patient.city
    urgent = is_urgent(patient.urgency)

    candidates = sort_candidates(
        [_build_candidate(d, reference_city, urgent, linked_donor_ids, now) for d in donors],
        sort_by
    )

    return CandidateListResponse(
        patient_id=patient.id,
        blood_type=patient.blood_type,
        urgency=patient.urgency.value,
        sort_by=sort_by,
        candidates=candidates[:limit or settings.CANDIDATE_LIMIT],
        total=len(candidates)
    )
