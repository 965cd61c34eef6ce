# src/modules/matching/scoring.py
"""Match score used to rank candidate donors for a request.

The score only orders the list shown to the clinic; it never excludes a donor.
"""

from typing import Optional

from src.models.models import URGENT_LEVELS, UrgencyLevel

ELIGIBLE_POINTS = 40
FIT_POINTS = 30
SAME_CITY_POINTS = 20
URGENT_SAME_CITY_POINTS = 10
MAX_EXPERIENCE_POINTS = 5

MAX_MATCH_SCORE = (
    ELIGIBLE_POINTS + FIT_POINTS + SAME_CITY_POINTS
    + URGENT_SAME_CITY_POINTS + MAX_EXPERIENCE_POINTS
)


def is_urgent(urgency: Optional[UrgencyLevel]) -> bool:
    return urgency in URGENT_LEVELS


def is_same_city(city: Optional[str], other: Optional[str]) -> bool:
    """Case-insensitive city comparison; an unknown city never matches."""
    if not city or not other:
        return False
    return city.strip().lower() == other.strip().lower()


def calculate_match_score(
    is_eligible: bool,
    is_fit: bool,
    same_city: bool,
    urgent: bool,
    donation_count: Optional[int]
) -> int:
    score = 0
    if is_eligible:
        score += ELIGIBLE_POINTS
    if is_fit:
        score += FIT_POINTS
    if same_city:
        score += SAME_CITY_POINTS
        # Urgency only helps when the donor can get there quickly
        if urgent:
            score += URGENT_SAME_CITY_POINTS
    score += max(0, min(donation_count or 0, MAX_EXPERIENCE_POINTS))
    return score
