# tests/test_seed.py

from sqlalchemy import func, select

from scripts.seed_test_data import clear_existing_data, seed_all_data
from src.models.models import User
from src.modules.matching.candidates_service import find_candidates
from src.modules.matching.schemas import EligibilityReason
from src.modules.requests import requests_service
from src.modules.requests.schemas import RequestCategory


async def test_seed_covers_each_candidate_case(session):
    seeded = await seed_all_data(session)
    clinic = seeded["clinic"]

    result = await find_candidates(session, seeded["patients"]["luna"].id, clinic)
    reasons = {c.dog_name: c.eligibility_reason for c in result.candidates}

    assert reasons == {
        "Bruno": EligibilityReason.ELIGIBLE,
        "Juniper": EligibilityReason.ELIGIBLE,
        "Maple": EligibilityReason.WAIT_PERIOD,
        "Ziggy": EligibilityReason.MEDICAL_CONDITION,
    }
    assert result.candidates[0].dog_name == "Bruno"

    pepper = await find_candidates(session, seeded["patients"]["pepper"].id, clinic)
    assert [c.dog_name for c in pepper.candidates] == ["Otis"]

    urgent = await requests_service.list_open_requests(session, RequestCategory.URGENT)
    assert [r.dog_name for r in urgent.requests] == ["Luna", "Pepper"]


async def test_clear_existing_data(session):
    await seed_all_data(session)

    await clear_existing_data(session)

    assert (await session.execute(select(func.count(User.id)))).scalar() == 0
