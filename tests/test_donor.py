# tests/test_donor.py

from datetime import timedelta
from uuid import uuid4

import pytest

from src.common.utils.errors import ValidationError
from src.models.models import DonorAppointment, MatchStatus, RequestStatus, UrgencyLevel
from src.modules.donor import donor_service
from src.modules.matching import matching_service
from src.modules.matching.schemas import EligibilityReason

from .conftest import NOW


async def test_stats_summarise_history_and_open_reservations(session, factory):
    clinic = await factory.clinic()
    patient = await factory.patient()
    donor = await factory.donor(donation_count=4, last_donation=NOW.date() - timedelta(days=120))
    await matching_service.create_match(session, clinic, patient.id, donor.id, now=NOW)

    stats = await donor_service.get_donor_stats(session, donor, now=NOW)

    assert stats.total_donations == 4
    assert stats.lives_saved == 12
    assert stats.last_donation == NOW.date() - timedelta(days=120)
    assert stats.eligibility.is_eligible is True
    assert stats.pending_requests == 1


async def test_stats_fall_back_to_completed_appointments(session, factory):
    clinic = await factory.clinic()
    patient = await factory.patient()
    donor = await factory.donor(donation_count=0)
    session.add(DonorAppointment(
        id=uuid4(),
        donor_id=donor.id,
        linked_patient_id=patient.id,
        clinic_id=clinic.id,
        status=MatchStatus.COMPLETED,
        matched_at=NOW - timedelta(days=90),
        completed_at=NOW - timedelta(days=80)
    ))
    await session.commit()

    stats = await donor_service.get_donor_stats(session, donor, now=NOW)

    assert stats.total_donations == 1
    assert stats.lives_saved == 3
    assert stats.pending_requests == 0


async def test_eligibility_for_recent_donor(factory):
    donor = await factory.donor(last_donation=NOW.date() - timedelta(days=10))

    status = donor_service.get_donor_eligibility(donor, now=NOW)

    assert status.reason == EligibilityReason.WAIT_PERIOD
    assert status.next_eligible_date == NOW.date() + timedelta(days=46)


async def test_appointments_filtered_by_status(session, factory):
    clinic = await factory.clinic()
    donor = await factory.donor()
    first = await factory.patient("Luna")
    second = await factory.patient("Pepper")
    kept = await matching_service.create_match(session, clinic, first.id, donor.id, now=NOW)
    dropped = await matching_service.create_match(session, clinic, second.id, donor.id, now=NOW + timedelta(minutes=5))
    await donor_service.decline_match(session, donor, dropped.appointment.id, now=NOW)

    everything = await donor_service.get_donor_appointments(session, donor)
    pending = await donor_service.get_donor_appointments(session, donor, "pending_donor_acceptance")
    declined = await donor_service.get_donor_appointments(session, donor, "rejected_by_donor")

    assert everything.total == 2
    assert everything.appointments[0].id == dropped.appointment.id
    assert [a.id for a in pending.appointments] == [kept.appointment.id]
    assert [a.id for a in declined.appointments] == [dropped.appointment.id]

    with pytest.raises(ValidationError):
        await donor_service.get_donor_appointments(session, donor, "lost")


async def test_request_feed_matches_blood_type_and_prefers_same_city(session, factory):
    donor = await factory.donor(city="Austin", blood_type="DEA 1.1+")
    await factory.patient("Luna", urgency=UrgencyLevel.IMMEDIATE, created_at=NOW - timedelta(hours=1))
    await factory.patient("Pepper", city="Dallas", urgency=UrgencyLevel.WITHIN_24_HOURS,
                          created_at=NOW - timedelta(minutes=10))
    await factory.patient("Scout", city=" austin ", urgency=UrgencyLevel.IMMEDIATE,
                          created_at=NOW - timedelta(hours=3))
    await factory.patient("Rocky", urgency=UrgencyLevel.NO_RUSH, created_at=NOW - timedelta(days=2))
    await factory.patient("Otis", blood_type="DEA 1.1-", urgency=UrgencyLevel.IMMEDIATE, created_at=NOW)
    await factory.patient("Max", urgency=UrgencyLevel.IMMEDIATE, created_at=NOW,
                          request_status=RequestStatus.COMPLETED)

    urgent = await donor_service.list_requests_for_donor(session, donor)
    everything = await donor_service.list_requests_for_donor(session, donor, only_urgent=False)

    assert [r.dog_name for r in urgent.requests] == ["Luna", "Scout", "Pepper"]
    assert urgent.per_page == donor_service.URGENT_FEED_LIMIT
    assert [r.dog_name for r in everything.requests] == ["Luna", "Scout", "Rocky", "Pepper"]
    assert everything.total == 4


async def test_request_feed_is_capped(session, factory):
    donor = await factory.donor()
    for minutes in range(donor_service.URGENT_FEED_LIMIT + 2):
        await factory.patient(f"Dog {minutes}", created_at=NOW - timedelta(minutes=minutes))

    urgent = await donor_service.list_requests_for_donor(session, donor)

    assert urgent.total == donor_service.URGENT_FEED_LIMIT
    assert urgent.requests[0].dog_name == "Dog 0"
