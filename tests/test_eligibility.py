# tests/test_eligibility.py

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from src.modules.matching.eligibility import (
    DONATION_INTERVAL_DAYS, evaluate_eligibility, is_medically_fit
)
from src.modules.matching.schemas import EligibilityReason

TODAY = date(2026, 10, 19)


def make_donor(last_donation=None, weight_kg=30.0, is_medical_condition=False):
    return SimpleNamespace(
        last_donation=last_donation,
        weight_kg=weight_kg,
        is_medical_condition=is_medical_condition,
    )


def test_first_time_donor_is_eligible():
    status = evaluate_eligibility(make_donor(), TODAY)

    assert status.is_eligible is True
    assert status.is_fit is True
    assert status.reason == EligibilityReason.ELIGIBLE
    assert status.next_eligible_date is None


def test_day_55_is_still_in_wait_period():
    last = TODAY - timedelta(days=55)
    status = evaluate_eligibility(make_donor(last_donation=last), TODAY)

    assert status.is_eligible is False
    assert status.is_fit is True
    assert status.reason == EligibilityReason.WAIT_PERIOD
    assert status.next_eligible_date == last + timedelta(days=DONATION_INTERVAL_DAYS)
    assert status.next_eligible_date == TODAY + timedelta(days=1)


def test_day_56_is_eligible_again():
    status = evaluate_eligibility(make_donor(last_donation=TODAY - timedelta(days=56)), TODAY)

    assert status.is_eligible is True
    assert status.reason == EligibilityReason.ELIGIBLE
    assert status.next_eligible_date is None


def test_accepts_datetimes():
    now = datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)
    last = datetime(2026, 8, 24, 8, 0, tzinfo=timezone.utc)  # 56 calendar days earlier

    status = evaluate_eligibility(make_donor(last_donation=last), now)

    assert status.is_eligible is True
    assert status.last_donation == date(2026, 8, 24)


def test_medical_condition_overrides_wait_period():
    donor = make_donor(last_donation=TODAY - timedelta(days=10), is_medical_condition=True)
    status = evaluate_eligibility(donor, TODAY)

    assert status.is_eligible is False
    assert status.is_fit is False
    assert status.reason == EligibilityReason.MEDICAL_CONDITION
    assert status.next_eligible_date is None


@pytest.mark.parametrize("weight", [None, 0, 12.5, 24.9])
def test_underweight_or_unknown_weight_is_unfit(weight):
    status = evaluate_eligibility(make_donor(weight_kg=weight), TODAY)

    assert status.is_eligible is False
    assert status.is_fit is False
    assert status.reason == EligibilityReason.UNDERWEIGHT
    assert status.next_eligible_date is None


@pytest.mark.parametrize("weight, expected", [(25, True), (25.0, True), (60, True), (24.99, False)])
def test_weight_threshold(weight, expected):
    assert is_medically_fit(make_donor(weight_kg=weight)) is expected


def test_fit_donor_in_wait_period_keeps_fitness():
    status = evaluate_eligibility(make_donor(last_donation=TODAY), TODAY)

    assert status.is_fit is True
    assert status.is_eligible is False
