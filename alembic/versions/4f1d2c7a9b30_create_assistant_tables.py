"""create assistant tables

Revision ID: 4f1d2c7a9b30
Revises:
Create Date: 2026-10-19 10:00:00.000000

Initial schema for the assistant pipeline:
1. recurrence_rules: repeating schedules (created first, tasks reference it)
2. tasks: to-do items and recurrence templates
3. reminders: timed reminders
4. meeting_rooms / room_reservations: the room booking resolver's tables

All timestamps are stored in UTC.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1d2c7a9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the assistant tables."""
    op.create_table(
        'recurrence_rules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('rule', sa.String(length=200), nullable=False),
        sa.Column('next_occurrence', sa.DateTime(timezone=True), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    # The tick selects on next_occurrence
    op.create_index(
        op.f('ix_recurrence_rules_next_occurrence'),
        'recurrence_rules',
        ['next_occurrence'],
        unique=False
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assignee_id', sa.String(length=100), nullable=True),
        sa.Column('labels', sa.JSON(), nullable=True),
        sa.Column('checklist', sa.JSON(), nullable=True),
        sa.Column('recurrence_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['recurrence_id'], ['recurrence_rules.id'], ondelete='SET NULL'),
    )
    op.create_index(op.f('ix_tasks_user_id'), 'tasks', ['user_id'], unique=False)
    op.create_index(op.f('ix_tasks_recurrence_id'), 'tasks', ['recurrence_id'], unique=False)

    op.create_table(
        'reminders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('remind_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sent', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reminders_user_id'), 'reminders', ['user_id'], unique=False)

    op.create_table(
        'meeting_rooms',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'room_reservations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('room_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('attendees', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['room_id'], ['meeting_rooms.id'], ondelete='CASCADE'),
    )
    op.create_index(op.f('ix_room_reservations_user_id'), 'room_reservations', ['user_id'], unique=False)
    # Conflict lookups filter on room and window
    op.create_index(
        'ix_room_reservations_room_window',
        'room_reservations',
        ['room_id', 'start', 'end'],
        unique=False
    )


def downgrade() -> None:
    """Drop the assistant tables."""
    op.drop_index('ix_room_reservations_room_window', table_name='room_reservations')
    op.drop_index(op.f('ix_room_reservations_user_id'), table_name='room_reservations')
    op.drop_table('room_reservations')
    op.drop_table('meeting_rooms')
    op.drop_index(op.f('ix_reminders_user_id'), table_name='reminders')
    op.drop_table('reminders')
    op.drop_index(op.f('ix_tasks_recurrence_id'), table_name='tasks')
    op.drop_index(op.f('ix_tasks_user_id'), table_name='tasks')
    op.drop_table('tasks')
    op.drop_index(op.f('ix_recurrence_rules_next_occurrence'), table_name='recurrence_rules')
    op.drop_table('recurrence_rules')
