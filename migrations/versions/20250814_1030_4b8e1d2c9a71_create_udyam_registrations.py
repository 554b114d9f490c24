"""create_udyam_registrations

Revision ID: 4b8e1d2c9a71
Revises:
Create Date: 2025-08-14 10:30:12.481203

Creates the udyam_registrations table tracking each applicant's progress
through the two step registration.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b8e1d2c9a71'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'udyam_registrations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('aadhaar_number', sa.String(12), nullable=False),
        sa.Column('mobile_number', sa.String(10), nullable=False),
        sa.Column('step1_completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('otp_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('step2_completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('pan_number', sa.String(10)),
        sa.Column('business_name', sa.String(100)),
        sa.Column('owner_name', sa.String(100)),
        sa.Column('date_of_birth', sa.String(32)),
        sa.Column('gender', sa.String(20)),
        sa.Column('social_category', sa.String(20)),
        sa.Column('physically_handicapped', sa.Boolean),
        sa.Column('ex_serviceman', sa.Boolean),
        sa.Column('registration_status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('udyam_number', sa.String(40)),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('submitted_at', sa.DateTime),
        sa.UniqueConstraint('aadhaar_number', name='uq_udyam_registrations_aadhaar_number'),
        sa.UniqueConstraint('udyam_number', name='uq_udyam_registrations_udyam_number'),
    )

    # Indexes for fast lookups
    op.create_index(
        'ix_udyam_registrations_aadhaar_number',
        'udyam_registrations',
        ['aadhaar_number'],
    )
    op.create_index(
        'ix_udyam_registrations_registration_status',
        'udyam_registrations',
        ['registration_status'],
    )
    op.create_index(
        'idx_udyam_registrations_created_at',
        'udyam_registrations',
        ['created_at'],
    )


def downgrade() -> None:
    op.drop_index('idx_udyam_registrations_created_at', table_name='udyam_registrations')
    op.drop_index('ix_udyam_registrations_registration_status', table_name='udyam_registrations')
    op.drop_index('ix_udyam_registrations_aadhaar_number', table_name='udyam_registrations')
    op.drop_table('udyam_registrations')
