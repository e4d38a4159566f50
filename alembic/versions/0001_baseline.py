"""Baseline migration - users, clients, appointments, notes

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates the identity table and the three owned record tables. Types are
portable so the same revision runs on PostgreSQL and SQLite.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOT_DELETED = "case_number IS NOT NULL AND lifecycle_state != 'deleted'"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _owned() -> list[sa.Column]:
    return [
        sa.Column(
            'owner_id',
            sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('lifecycle_state', sa.String(20), nullable=False, server_default='active'),
    ]


def upgrade() -> None:
    """Create identity and record tables."""

    # ==========================================================================
    # Users
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # ==========================================================================
    # Clients
    # ==========================================================================
    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        *_owned(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(30), nullable=False),
        sa.Column('alternate_phone', sa.String(30), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('case_type', sa.String(30), nullable=False),
        sa.Column('case_number', sa.String(100), nullable=True),
        sa.Column('case_description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('retainer_fee', sa.Float(), nullable=True),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('total_billed', sa.Float(), nullable=False),
        sa.Column('notes', sa.JSON(), nullable=False),
        sa.Column('documents', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_clients_owner_id', 'clients', ['owner_id'])
    op.create_index('idx_clients_owner_name', 'clients', ['owner_id', 'name'])
    op.create_index('idx_clients_owner_phone', 'clients', ['owner_id', 'phone'])
    op.create_index('idx_clients_owner_status', 'clients', ['owner_id', 'status'])
    op.create_index(
        'uq_clients_owner_case_number',
        'clients',
        ['owner_id', 'case_number'],
        unique=True,
        postgresql_where=sa.text(NOT_DELETED),
        sqlite_where=sa.text(NOT_DELETED),
    )

    # ==========================================================================
    # Appointments
    # ==========================================================================
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        *_owned(),
        sa.Column(
            'client_id',
            sa.Uuid(),
            sa.ForeignKey('clients.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reminder_minutes', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('appointment_type', sa.String(30), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('recurring_pattern', sa.JSON(), nullable=True),
        sa.Column('attendees', sa.JSON(), nullable=False),
        sa.Column('notes', sa.JSON(), nullable=False),
        sa.Column('documents', sa.JSON(), nullable=False),
        sa.Column('billable_hours', sa.Float(), nullable=False),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('total_amount', sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_appointments_owner_id', 'appointments', ['owner_id'])
    op.create_index('idx_appointments_owner_start', 'appointments', ['owner_id', 'start_time'])
    op.create_index('idx_appointments_owner_client', 'appointments', ['owner_id', 'client_id'])
    op.create_index('idx_appointments_owner_status', 'appointments', ['owner_id', 'status'])
    op.create_index('idx_appointments_window', 'appointments', ['start_time', 'end_time'])

    # ==========================================================================
    # Notes
    # ==========================================================================
    op.create_table(
        'notes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        *_owned(),
        sa.Column(
            'client_id',
            sa.Uuid(),
            sa.ForeignKey('clients.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'appointment_id',
            sa.Uuid(),
            sa.ForeignKey('appointments.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('note_type', sa.String(30), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('voice_recording', sa.JSON(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        sa.Column('is_favorite', sa.Boolean(), nullable=False),
        sa.Column('reminder_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_accessed_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('idx_notes_owner_created', 'notes', ['owner_id', 'created_at'])
    op.create_index('idx_notes_owner_client', 'notes', ['owner_id', 'client_id'])
    op.create_index('idx_notes_owner_appointment', 'notes', ['owner_id', 'appointment_id'])
    op.create_index('idx_notes_owner_type', 'notes', ['owner_id', 'note_type'])
    op.create_index('idx_notes_owner_state', 'notes', ['owner_id', 'lifecycle_state'])

    op.create_table(
        'note_tags',
        sa.Column(
            'note_id',
            sa.Uuid(),
            sa.ForeignKey('notes.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column('tag', sa.String(50), primary_key=True),
    )
    op.create_index('idx_note_tags_tag', 'note_tags', ['tag'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('note_tags')
    op.drop_table('notes')
    op.drop_table('appointments')
    op.drop_table('clients')
    op.drop_table('users')
