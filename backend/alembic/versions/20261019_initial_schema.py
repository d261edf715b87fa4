"""Initial schema: users, staff, tasks, trailers, documents, insurance

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20261019_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users - Login identities with a canonical role
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),  # staff, manager, admin, super_admin
        sa.Column('approval_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('approved_by', sa.UUID(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_approval_status', 'users', ['approval_status'])

    # staff - Personnel records; user_id is a reference by value, not a FK
    op.create_table(
        'staff',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role_label', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=50), nullable=False),
        sa.Column('contact', sa.String(length=255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_staff_active', 'staff', ['active'])
    op.create_index('ix_staff_user_id', 'staff', ['user_id'], unique=True)

    # tasks - assigned_to references staff.id by value
    op.create_table(
        'tasks',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('assigned_to', sa.UUID(), nullable=False),
        sa.Column('assigned_by', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='Medium'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tasks_assigned_to', 'tasks', ['assigned_to'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])

    # trailers - Company-owned fleet
    op.create_table(
        'trailers',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('trailer_no', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('vin_no', sa.String(length=50), nullable=False),
        sa.Column('license_plate', sa.String(length=20), nullable=False),
        sa.Column('registration_expiry', sa.DateTime(timezone=True), nullable=False),
        sa.Column('old_license_plate', sa.String(length=20), nullable=True),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('rent', sa.Float(), nullable=False),
        sa.Column('advance', sa.Float(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_trailers_trailer_no', 'trailers', ['trailer_no'], unique=True)
    op.create_index('ix_trailers_status', 'trailers', ['status'])

    # documents - Metadata for files in local upload storage
    op.create_table(
        'documents',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('path', sa.String(length=500), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('uploaded_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('filename'),
    )

    # insurance_policies - Cover per trailer; status is derived on every write
    op.create_table(
        'insurance_policies',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('trailer_id', sa.UUID(), nullable=False),
        sa.Column('provider', sa.String(length=255), nullable=False),
        sa.Column('policy_number', sa.String(length=100), nullable=False),
        sa.Column('policy_type', sa.String(length=50), nullable=False, server_default='Comprehensive'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('premium', sa.Float(), nullable=False),
        sa.Column('premium_frequency', sa.String(length=20), nullable=False, server_default='Annual'),
        sa.Column('coverage_amount', sa.Float(), nullable=True),
        sa.Column('deductible', sa.Float(), nullable=True),
        sa.Column('docusign_envelope_id', sa.String(length=100), nullable=True),
        sa.Column('verification_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('verified_by', sa.UUID(), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('notify_before_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('notify_by_email', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('notify_by_sms', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('last_notification_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['trailer_id'], ['trailers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_insurance_policies_trailer_id', 'insurance_policies', ['trailer_id'])
    op.create_index('ix_insurance_policies_policy_number', 'insurance_policies', ['policy_number'], unique=True)
    op.create_index('ix_insurance_policies_expiry_date', 'insurance_policies', ['expiry_date'])
    op.create_index('ix_insurance_policies_status', 'insurance_policies', ['status'])
    op.create_index('ix_insurance_policies_verification_status', 'insurance_policies', ['verification_status'])

    # insurance_policy_documents - Append-only attachment list
    op.create_table(
        'insurance_policy_documents',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('policy_id', sa.UUID(), nullable=False),
        sa.Column('document_id', sa.UUID(), nullable=False),  # No FK: documents are a separate domain
        sa.Column('document_type', sa.String(length=50), nullable=False, server_default='Policy Document'),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['policy_id'], ['insurance_policies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_insurance_policy_documents_policy_id', 'insurance_policy_documents', ['policy_id'])


def downgrade() -> None:
    op.drop_table('insurance_policy_documents')
    op.drop_table('insurance_policies')
    op.drop_table('documents')
    op.drop_table('trailers')
    op.drop_table('tasks')
    op.drop_table('staff')
    op.drop_table('users')
