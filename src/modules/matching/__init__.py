# src/modules/matching/__init__.py
"""Donor matching: eligibility, scoring and the donor-to-request link."""

from .eligibility import evaluate_eligibility, is_medically_fit
from .scoring import calculate_match_score

__all__ = ["evaluate_eligibility", "is_medically_fit", "calculate_match_score"]
