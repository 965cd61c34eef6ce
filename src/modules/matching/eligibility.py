# src/modules/matching/eligibility.py
"""Donor eligibility rules.

A donor is eligible when at least 56 days have passed since the last donation
and the dog is medically fit (no reported medical condition, at least 25 kg).
Fitness is the medical-only half of eligibility; the match scorer weighs the
two separately.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from .schemas import EligibilityReason, EligibilityStatus

DONATION_INTERVAL_DAYS = 56  # 8 weeks
MIN_DONOR_WEIGHT_KG = 25


def _to_date(value: Optional[Union[date, datetime]]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_medically_fit(donor) -> bool:
    """No medical condition and a known weight of at least 25 kg."""
    if donor.is_medical_condition:
        return False
    return donor.weight_kg is not None and donor.weight_kg >= MIN_DONOR_WEIGHT_KG


def evaluate_eligibility(donor, now: Union[date, datetime]) -> EligibilityStatus:
    """Decide whether ``donor`` may donate at ``now``.

    Medical and weight problems have no computable next date and win over the
    wait period, so callers route those donors to manual review instead of a
    calendar date.
    """
    today = _to_date(now)
    last_donation = _to_date(donor.last_donation)
    fit = is_medically_fit(donor)

    if not fit:
        reason = (
            EligibilityReason.MEDICAL_CONDITION
            if donor.is_medical_condition
            else EligibilityReason.UNDERWEIGHT
        )
        return EligibilityStatus(
            is_eligible=False,
            is_fit=False,
            reason=reason,
            last_donation=last_donation,
            next_eligible_date=None,
        )

    if last_donation is not None:
        if (today - last_donation).days < DONATION_INTERVAL_DAYS:
            return EligibilityStatus(
                is_eligible=False,
                is_fit=True,
                reason=EligibilityReason.WAIT_PERIOD,
                last_donation=last_donation,
                next_eligible_date=last_donation + timedelta(days=DONATION_INTERVAL_DAYS),
            )

    return EligibilityStatus(
        is_eligible=True,
        is_fit=True,
        reason=EligibilityReason.ELIGIBLE,
        last_donation=last_donation,
        next_eligible_date=None,
    )
