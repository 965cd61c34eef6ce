# src/models/models.py

import uuid
import enum

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, Float, ForeignKey,
    Index, Integer, String, Text, DateTime, Uuid,
    Enum as SAEnum,
    func,
)
from sqlalchemy.orm import declarative_base, relationship, backref

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(enum.Enum):
    PATIENT = "patient"
    DONOR = "donor"
    CLINIC = "clinic"
    ADMIN = "admin"


class UrgencyLevel(enum.Enum):
    IMMEDIATE = "immediate"
    WITHIN_24_HOURS = "within_24_hours"
    WITHIN_3_DAYS = "within_3_days"
    NO_RUSH = "no_rush"


class RequestStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class MatchStatus(enum.Enum):
    PENDING_DONOR_ACCEPTANCE = "pending_donor_acceptance"
    CONFIRMED = "confirmed"
    REJECTED_BY_DONOR = "rejected_by_donor"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationType(enum.Enum):
    MATCH_FOUND = "match_found"
    DONOR_MATCHED = "donor_matched"
    APPOINTMENT_CONFIRMED = "appointment_confirmed"
    DONOR_DECLINED = "donor_declined"
    MATCH_CANCELLED = "match_cancelled"
    DONATION_COMPLETED = "donation_completed"
    REQUEST_REJECTED = "request_rejected"
    CASE_COMPLETED = "case_completed"
    SYSTEM = "system"


# Urgency classes shown in the clinic's "urgent" tab
URGENT_LEVELS = (UrgencyLevel.IMMEDIATE, UrgencyLevel.WITHIN_24_HOURS)
REGULAR_LEVELS = (UrgencyLevel.WITHIN_3_DAYS, UrgencyLevel.NO_RUSH)

# An appointment in one of these states links its donor to the request
LINKED_MATCH_STATUSES = (
    MatchStatus.PENDING_DONOR_ACCEPTANCE,
    MatchStatus.CONFIRMED,
    MatchStatus.COMPLETED,
)


# ============================================================================
# USER MODELS
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.PATIENT)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


class Donor(Base):
    """A donor dog and its owner's donation history."""
    __tablename__ = "donors"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    dog_name = Column(String(100), nullable=False)
    breed = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    blood_type = Column(String(20), nullable=False)
    weight_kg = Column(Float, nullable=True)
    last_donation = Column(Date, nullable=True)
    is_medical_condition = Column(Boolean, default=False, nullable=False)
    donation_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationship
    user = relationship("User", backref=backref("donor", uselist=False, cascade="all, delete-orphan"))

    __table_args__ = (
        CheckConstraint("weight_kg IS NULL OR weight_kg >= 0", name="ck_donors_weight_non_negative"),
        CheckConstraint("donation_count >= 0", name="ck_donors_donation_count_non_negative"),
        Index("idx_donors_blood_type", "blood_type"),
    )

    def __repr__(self):
        return f"<Donor(id={self.id}, dog_name={self.dog_name}, blood_type={self.blood_type})>"


class Clinic(Base):
    __tablename__ = "clinics"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationship
    user = relationship("User", backref=backref("clinic", uselist=False, cascade="all, delete-orphan"))

    def __repr__(self):
        return f"<Clinic(id={self.id}, name={self.name})>"


class Patient(Base):
    """A patient dog together with its open blood request."""
    __tablename__ = "patients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    dog_name = Column(String(100), nullable=False)
    breed = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    blood_type = Column(String(20), nullable=False)
    weight_kg = Column(Float, nullable=True)
    urgency = Column(SAEnum(UrgencyLevel), nullable=False, default=UrgencyLevel.NO_RUSH)
    quantity_needed = Column(String(50), nullable=True)
    reason = Column(Text, nullable=True)
    request_status = Column(SAEnum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    pending_matches = Column(Integer, default=0, nullable=False)
    confirmed_matches = Column(Integer, default=0, nullable=False)
    assigned_clinic_id = Column(Uuid(as_uuid=True), ForeignKey("clinics.id", ondelete="SET NULL"), nullable=True)
    appointment_date = Column(Date, nullable=True)
    request_expires = Column(DateTime(timezone=True), nullable=True)  # Advisory only
    case_notes = Column(Text, nullable=True)
    completed_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", backref=backref("patient", uselist=False, cascade="all, delete-orphan"))
    assigned_clinic = relationship("Clinic", backref=backref("cases", lazy="dynamic"))

    __table_args__ = (
        CheckConstraint("pending_matches >= 0", name="ck_patients_pending_matches_non_negative"),
        CheckConstraint("confirmed_matches >= 0", name="ck_patients_confirmed_matches_non_negative"),
        Index("idx_patients_request_status", "request_status"),
        Index("idx_patients_assigned_clinic", "assigned_clinic_id", "request_status"),
    )

    def __repr__(self):
        return f"<Patient(id={self.id}, dog_name={self.dog_name}, status={self.request_status.value})>"


# ============================================================================
# MATCHING MODELS
# ============================================================================

class DonorAppointment(Base):
    """A clinic's proposed donor-to-request link and the resulting appointment."""
    __tablename__ = "donor_appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    donor_id = Column(Uuid(as_uuid=True), ForeignKey("donors.id", ondelete="CASCADE"), nullable=False)
    linked_patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    clinic_id = Column(Uuid(as_uuid=True), ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False)
    status = Column(SAEnum(MatchStatus), nullable=False, default=MatchStatus.PENDING_DONOR_ACCEPTANCE)
    match_score = Column(Integer, nullable=True)
    appointment_date = Column(Date, nullable=True)
    appointment_time = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    matched_at = Column(DateTime(timezone=True), nullable=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    accepted_by = Column(Uuid(as_uuid=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(Uuid(as_uuid=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    donor = relationship("Donor", backref=backref("appointments", lazy="dynamic", cascade="all, delete-orphan"))
    patient = relationship("Patient", backref=backref("appointments", lazy="dynamic", cascade="all, delete-orphan"))
    clinic = relationship("Clinic", backref=backref("appointments", lazy="dynamic"))

    __table_args__ = (
        Index("idx_donor_appointments_pair", "donor_id", "linked_patient_id"),
        Index("idx_donor_appointments_patient_status", "linked_patient_id", "status"),
        Index("idx_donor_appointments_clinic", "clinic_id"),
    )

    def __repr__(self):
        return f"<DonorAppointment(id={self.id}, donor_id={self.donor_id}, status={self.status.value})>"


# ============================================================================
# NOTIFICATION MODELS
# ============================================================================

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user_role = Column(SAEnum(UserRole), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(SAEnum(NotificationType), nullable=False, default=NotificationType.SYSTEM)
    data = Column(JSON, nullable=True)  # Payload mirroring the triggering event
    reference_id = Column(Uuid(as_uuid=True), nullable=True)
    reference_type = Column(String(50), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationship
    user = relationship("User", backref=backref("notifications", lazy="dynamic", cascade="all, delete-orphan"))

    __table_args__ = (
        Index("idx_notifications_user", "user_id"),
        Index("idx_notifications_unread", "user_id", "is_read"),
        Index("idx_notifications_reference", "reference_id"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, type={self.type.value}, title={self.title})>"
