# tests/test_candidates.py

from datetime import timedelta
from uuid import uuid4

import pytest

from src.common.utils.errors import NotFound
from src.modules.donor import donor_service
from src.modules.matching import matching_service
from src.modules.matching.candidates_service import find_candidates
from src.modules.matching.schemas import CandidateSort, EligibilityReason

from .conftest import NOW


@pytest.fixture
async def pool(factory):
    """Clinic in Austin, an urgent DEA 1.1+ request and five donors."""
    today = NOW.date()
    clinic = await factory.clinic(city="Austin")
    patient = await factory.patient(blood_type="DEA 1.1+", city="Austin")
    donors = {
        "bruno": await factory.donor("Bruno", city="Austin", donation_count=4,
                                     last_donation=today - timedelta(days=120)),
        "maple": await factory.donor("Maple", city="austin", donation_count=2,
                                     last_donation=today - timedelta(days=21)),
        "ziggy": await factory.donor("Ziggy", city="Austin", is_medical_condition=True),
        "juniper": await factory.donor("Juniper", city="Dallas"),
        "otis": await factory.donor("Otis", city="Austin", blood_type="DEA 1.1-", donation_count=9),
    }
    return clinic, patient, donors


async def test_only_matching_blood_type_and_ineligible_donors_stay_listed(session, pool):
    clinic, patient, donors = pool

    result = await find_candidates(session, patient.id, clinic, now=NOW)

    names = [c.dog_name for c in result.candidates]
    assert names == ["Bruno", "Juniper", "Maple", "Ziggy"]
    assert result.total == 4
    assert all(c.blood_type == "DEA 1.1+" for c in result.candidates)

    by_name = {c.dog_name: c for c in result.candidates}
    assert by_name["Bruno"].match_score == 104
    assert by_name["Juniper"].match_score == 70
    assert by_name["Maple"].match_score == 62
    assert by_name["Ziggy"].match_score == 30

    assert by_name["Maple"].eligibility_reason == EligibilityReason.WAIT_PERIOD
    assert by_name["Maple"].next_eligible_date == NOW.date() + timedelta(days=35)
    assert by_name["Ziggy"].is_fit is False
    assert by_name["Ziggy"].next_eligible_date is None
    assert by_name["Juniper"].is_same_city is False
    assert by_name["Juniper"].distance == 1


async def test_sort_by_distance_puts_same_city_first(session, pool):
    clinic, patient, _ = pool

    result = await find_candidates(session, patient.id, clinic, CandidateSort.DISTANCE, now=NOW)

    assert [c.dog_name for c in result.candidates] == ["Bruno", "Maple", "Ziggy", "Juniper"]


async def test_sort_by_experience(session, pool):
    clinic, patient, _ = pool

    result = await find_candidates(session, patient.id, clinic, CandidateSort.EXPERIENCE, now=NOW)

    assert [c.dog_name for c in result.candidates] == ["Bruno", "Maple", "Juniper", "Ziggy"]


async def test_city_falls_back_to_request_city(session, factory):
    patient = await factory.patient(city="Dallas")
    await factory.donor("Juniper", city="Dallas")

    result = await find_candidates(session, patient.id, now=NOW)

    assert result.candidates[0].is_same_city is True
    assert result.candidates[0].match_score == 100


async def test_limit_caps_list_but_not_total(session, pool):
    clinic, patient, _ = pool

    result = await find_candidates(session, patient.id, clinic, now=NOW, limit=2)

    assert [c.dog_name for c in result.candidates] == ["Bruno", "Juniper"]
    assert result.total == 4


async def test_already_linked_follows_active_reservations(session, pool):
    clinic, patient, donors = pool
    bruno, maple = donors["bruno"], donors["maple"]

    bruno_match = await matching_service.create_match(session, clinic, patient.id, bruno.id, now=NOW)
    maple_match = await matching_service.create_match(session, clinic, patient.id, maple.id, now=NOW)
    await donor_service.decline_match(session, maple, maple_match.appointment.id, now=NOW)

    result = await find_candidates(session, patient.id, clinic, now=NOW)
    linked = {c.dog_name: c.already_linked for c in result.candidates}

    assert bruno_match.appointment is not None
    assert linked == {"Bruno": True, "Juniper": False, "Maple": False, "Ziggy": False}


async def test_unknown_request(session):
    with pytest.raises(NotFound):
        await find_candidates(session, uuid4(), now=NOW)
