"""create matching schema

Revision ID: a3f1c9d27e40
Revises:
Create Date: 2026-10-12 09:14:52.480113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a3f1c9d27e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Named types shared between tables are created once, before the tables
userrole = postgresql.ENUM('PATIENT', 'DONOR', 'CLINIC', 'ADMIN', name='userrole', create_type=False)
urgencylevel = postgresql.ENUM('IMMEDIATE', 'WITHIN_24_HOURS', 'WITHIN_3_DAYS', 'NO_RUSH', name='urgencylevel', create_type=False)
requeststatus = postgresql.ENUM('PENDING', 'ACCEPTED', 'REJECTED', 'COMPLETED', name='requeststatus', create_type=False)
matchstatus = postgresql.ENUM(
    'PENDING_DONOR_ACCEPTANCE', 'CONFIRMED', 'REJECTED_BY_DONOR', 'COMPLETED', 'CANCELLED',
    name='matchstatus', create_type=False
)
notificationtype = postgresql.ENUM(
    'MATCH_FOUND', 'DONOR_MATCHED', 'APPOINTMENT_CONFIRMED', 'DONOR_DECLINED', 'MATCH_CANCELLED',
    'DONATION_COMPLETED', 'REQUEST_REJECTED', 'CASE_COMPLETED', 'SYSTEM',
    name='notificationtype', create_type=False
)

ENUMS = (userrole, urgencylevel, requeststatus, matchstatus, notificationtype)


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_type in ENUMS:
            enum_type.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', userrole, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'donors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('dog_name', sa.String(length=100), nullable=False),
        sa.Column('breed', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('blood_type', sa.String(length=20), nullable=False),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('last_donation', sa.Date(), nullable=True),
        sa.Column('is_medical_condition', sa.Boolean(), nullable=False),
        sa.Column('donation_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('weight_kg IS NULL OR weight_kg >= 0', name='ck_donors_weight_non_negative'),
        sa.CheckConstraint('donation_count >= 0', name='ck_donors_donation_count_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('idx_donors_blood_type', 'donors', ['blood_type'])

    op.create_table(
        'clinics',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'patients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('dog_name', sa.String(length=100), nullable=False),
        sa.Column('breed', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('blood_type', sa.String(length=20), nullable=False),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('urgency', urgencylevel, nullable=False),
        sa.Column('quantity_needed', sa.String(length=50), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('request_status', requeststatus, nullable=False),
        sa.Column('pending_matches', sa.Integer(), nullable=False),
        sa.Column('confirmed_matches', sa.Integer(), nullable=False),
        sa.Column('assigned_clinic_id', sa.Uuid(), nullable=True),
        sa.Column('appointment_date', sa.Date(), nullable=True),
        sa.Column('request_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('case_notes', sa.Text(), nullable=True),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('pending_matches >= 0', name='ck_patients_pending_matches_non_negative'),
        sa.CheckConstraint('confirmed_matches >= 0', name='ck_patients_confirmed_matches_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_clinic_id'], ['clinics.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('idx_patients_request_status', 'patients', ['request_status'])
    op.create_index('idx_patients_assigned_clinic', 'patients', ['assigned_clinic_id', 'request_status'])

    op.create_table(
        'donor_appointments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('donor_id', sa.Uuid(), nullable=False),
        sa.Column('linked_patient_id', sa.Uuid(), nullable=False),
        sa.Column('clinic_id', sa.Uuid(), nullable=False),
        sa.Column('status', matchstatus, nullable=False),
        sa.Column('match_score', sa.Integer(), nullable=True),
        sa.Column('appointment_date', sa.Date(), nullable=True),
        sa.Column('appointment_time', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('matched_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_by', sa.Uuid(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_by', sa.Uuid(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['donor_id'], ['donors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['linked_patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['clinic_id'], ['clinics.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_donor_appointments_pair', 'donor_appointments', ['donor_id', 'linked_patient_id'])
    op.create_index('idx_donor_appointments_patient_status', 'donor_appointments', ['linked_patient_id', 'status'])
    op.create_index('idx_donor_appointments_clinic', 'donor_appointments', ['clinic_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('user_role', userrole, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', notificationtype, nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('reference_id', sa.Uuid(), nullable=True),
        sa.Column('reference_type', sa.String(length=50), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notifications_user', 'notifications', ['user_id'])
    op.create_index('idx_notifications_unread', 'notifications', ['user_id', 'is_read'])
    op.create_index('idx_notifications_reference', 'notifications', ['reference_id'])


def downgrade() -> None:
    # Drop tables in reverse order of dependencies
    op.drop_table('notifications')
    op.drop_table('donor_appointments')
    op.drop_table('patients')
    op.drop_table('clinics')
    op.drop_table('donors')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_type in reversed(ENUMS):
            enum_type.drop(bind, checkfirst=True)
