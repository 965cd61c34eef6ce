# scripts/seed_test_data.py
"""
Seed script for VetBlood testing.
Creates one clinic, a pool of donor dogs and a few open blood requests, so
the candidate search shows every eligibility case.

Cast:
- CLINIC: Riverside Animal Hospital (Austin) - emergency and transfusion care
- DONORS:
    Bruno   DEA 1.1+  Austin   ready to donate, 4 previous donations
    Maple   DEA 1.1+  Austin   donated 3 weeks ago, still in the wait period
    Ziggy   DEA 1.1+  Austin   under treatment for a heart murmur
    Juniper DEA 1.1+  Dallas   ready to donate, first time
    Otis    DEA 1.1-  Austin   ready to donate, different blood type
- PATIENTS:
    Luna    DEA 1.1+  immediate        rodenticide poisoning
    Pepper  DEA 1.1-  within_24_hours  surgery blood loss
    Rocky   DEA 1.1+  no_rush          planned splenectomy

Run: python -m scripts.seed_test_data [--reset]
"""

import asyncio
import sys
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import async_session, init_db
from src.models.models import (
    User, Donor, Clinic, Patient, DonorAppointment, Notification,
    UserRole, UrgencyLevel, RequestStatus, NotificationType
)


async def clear_existing_data(db: AsyncSession):
    """Clear all test data (if needed for re-seeding)."""
    print("🧹 Clearing existing data...")

    # Delete in reverse order of dependencies
    tables_to_clear = [
        Notification,
        DonorAppointment,
        Patient,
        Donor,
        Clinic,
        User,
    ]

    for table in tables_to_clear:
        await db.execute(delete(table))

    await db.commit()
    print("✅ Data cleared")


async def seed_all_data(db: AsyncSession) -> dict:
    """Main seeding function. Returns the created rows keyed by name."""
    print("\n🌱 Starting VetBlood Test Data Seed")
    print("=" * 50)

    clinic = await create_clinic(db)
    donors = await create_donors(db)
    patients = await create_patients(db)
    await create_notifications(db, clinic)

    await db.commit()

    print("\n" + "=" * 50)
    print("✅ Seed complete! Test accounts:")
    print(f"   Clinic:  {clinic.user.email}")
    for donor in donors.values():
        print(f"   Donor:   {donor.user.email} ({donor.blood_type}, {donor.city})")
    for patient in patients.values():
        print(f"   Patient: {patient.user.email} ({patient.blood_type}, {patient.urgency.value})")
    print("=" * 50 + "\n")

    return {"clinic": clinic, "donors": donors, "patients": patients}


# =============================================================================
# USERS & PROFILES
# =============================================================================

def _user(email: str, role: UserRole, first_name: str, last_name: str, phone: str = None) -> User:
    return User(
        email=email,
        role=role,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        is_active=True
    )


async def create_clinic(db: AsyncSession) -> Clinic:
    """Riverside Animal Hospital."""
    print("🏥 Creating clinic...")

    user = _user("riverside@test.com", UserRole.CLINIC, "Dana", "Whitfield", "+1 512 555 0100")
    clinic = Clinic(
        user=user,
        name="Riverside Animal Hospital",
        city="Austin",
        address="1200 Riverside Dr",
        phone="+1 512 555 0100",
        is_verified=True
    )
    db.add(clinic)
    await db.flush()
    return clinic


async def create_donors(db: AsyncSession) -> dict:
    """One donor per eligibility case the candidate search distinguishes."""
    print("🐕 Creating donors...")

    today = date.today()
    rows = [
        # key, owner email, owner first/last, dog, breed, city, blood, kg, last donation, condition, count
        ("bruno", "sam@test.com", "Sam", "Ortiz", "Bruno", "Greyhound", "Austin", "DEA 1.1+", 32.0, today - timedelta(days=120), False, 4),
        ("maple", "priya@test.com", "Priya", "Nair", "Maple", "Labrador Retriever", "Austin", "DEA 1.1+", 29.5, today - timedelta(days=21), False, 2),
        ("ziggy", "leo@test.com", "Leo", "Brandt", "Ziggy", "Boxer", "Austin", "DEA 1.1+", 30.0, None, True, 0),
        ("juniper", "ana@test.com", "Ana", "Costa", "Juniper", "Golden Retriever", "Dallas", "DEA 1.1+", 27.0, None, False, 0),
        ("otis", "kim@test.com", "Kim", "Park", "Otis", "German Shepherd", "Austin", "DEA 1.1-", 38.0, None, False, 1),
    ]

    donors = {}
    for key, email, first, last, dog, breed, city, blood, kg, last_donation, condition, count in rows:
        donor = Donor(
            user=_user(email, UserRole.DONOR, first, last),
            dog_name=dog,
            breed=breed,
            city=city,
            blood_type=blood,
            weight_kg=kg,
            last_donation=last_donation,
            is_medical_condition=condition,
            donation_count=count
        )
        db.add(donor)
        donors[key] = donor

    await db.flush()
    return donors


async def create_patients(db: AsyncSession) -> dict:
    """Open blood requests across the urgent and regular tabs."""
    print("🩸 Creating blood requests...")

    now = datetime.now(timezone.utc)
    rows = [
        ("luna", "maria@test.com", "Maria", "Lopez", "Luna", "Border Collie", "Austin", "DEA 1.1+", 18.0,
         UrgencyLevel.IMMEDIATE, "2 units", "Rodenticide poisoning, PCV 12%", timedelta(hours=2)),
        ("pepper", "tom@test.com", "Tom", "Reyes", "Pepper", "Beagle", "Austin", "DEA 1.1-", 12.5,
         UrgencyLevel.WITHIN_24_HOURS, "1 unit", "Blood loss after mass removal", timedelta(hours=5)),
        ("rocky", "jen@test.com", "Jen", "Hale", "Rocky", "Rottweiler", "Round Rock", "DEA 1.1+", 45.0,
         UrgencyLevel.NO_RUSH, "1 unit", "Planned splenectomy", timedelta(days=1)),
    ]

    patients = {}
    for key, email, first, last, dog, breed, city, blood, kg, urgency, quantity, reason, age in rows:
        patient = Patient(
            user=_user(email, UserRole.PATIENT, first, last),
            dog_name=dog,
            breed=breed,
            city=city,
            blood_type=blood,
            weight_kg=kg,
            urgency=urgency,
            quantity_needed=quantity,
            reason=reason,
            request_status=RequestStatus.PENDING,
            pending_matches=0,
            confirmed_matches=0,
            request_expires=now - age + timedelta(days=7),
            created_at=now - age
        )
        db.add(patient)
        patients[key] = patient

    await db.flush()
    return patients


async def create_notifications(db: AsyncSession, clinic: Clinic):
    """Welcome notification for the clinic."""
    print("🔔 Creating notifications...")

    db.add(Notification(
        user_id=clinic.user_id,
        user_role=UserRole.CLINIC,
        type=NotificationType.SYSTEM,
        title="Welcome to VetBlood",
        message="Open blood requests are waiting in the Urgent tab.",
        data={},
        is_read=False,
        created_at=datetime.now(timezone.utc)
    ))
    await db.flush()


# =============================================================================
# MAIN
# =============================================================================

async def main():
    """Run the seed script."""
    await init_db()
    async with async_session() as db:
        try:
            if "--reset" in sys.argv:
                await clear_existing_data(db)
            await seed_all_data(db)
        except Exception as e:
            await db.rollback()
            print(f"\n❌ Error during seeding: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
