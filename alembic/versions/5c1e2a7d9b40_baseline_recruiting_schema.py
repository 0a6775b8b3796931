"""baseline_recruiting_schema

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2025-08-18 09:12:44.104511

Production-safe migration: Only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c1e2a7d9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('auth_users'):
        op.create_table('auth_users',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('email', sa.String(length=320), nullable=False),
            sa.Column('email_confirmed_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('last_sign_in_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_auth_users_email'), 'auth_users', ['email'], unique=True)

    if not table_exists('app_users'):
        op.create_table('app_users',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('auth_user_id', sa.String(length=36), nullable=False),
            sa.Column('role', sa.Enum('student', 'recruiter', 'admin', name='user_role'), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['auth_user_id'], ['auth_users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_app_users_auth_user_id'), 'app_users', ['auth_user_id'], unique=True)
        op.create_index(op.f('ix_app_users_role'), 'app_users', ['role'], unique=False)
        op.create_index(op.f('ix_app_users_created_at'), 'app_users', ['created_at'], unique=False)

    if not table_exists('recruiting_events'):
        op.create_table('recruiting_events',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_recruiting_events_is_active'), 'recruiting_events', ['is_active'], unique=False)
        op.create_index(op.f('ix_recruiting_events_created_at'), 'recruiting_events', ['created_at'], unique=False)
        op.create_index(
            'uq_recruiting_events_single_active',
            'recruiting_events',
            ['is_active'],
            unique=True,
            sqlite_where=sa.text('is_active = 1'),
            postgresql_where=sa.text('is_active'),
        )

    if not table_exists('students'):
        op.create_table('students',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('event_id', sa.String(length=36), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=False),
            sa.Column('email', sa.String(length=320), nullable=False),
            sa.Column('university', sa.String(length=255), nullable=False),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('degree', sa.String(length=255), nullable=True),
            sa.Column('gpa', sa.Float(), nullable=True),
            sa.Column('resume_path', sa.String(length=512), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['event_id'], ['recruiting_events.id'], ),
            sa.ForeignKeyConstraint(['id'], ['app_users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_students_event_id'), 'students', ['event_id'], unique=False)
        op.create_index(op.f('ix_students_created_at'), 'students', ['created_at'], unique=False)
        op.create_index('idx_students_event_created', 'students', ['event_id', 'created_at'], unique=False)

    if not table_exists('interviews'):
        op.create_table('interviews',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('event_id', sa.String(length=36), nullable=False),
            sa.Column('student_id', sa.String(length=36), nullable=False),
            sa.Column('recruiter_id', sa.String(length=36), nullable=False),
            sa.Column('rating_overall', sa.Integer(), nullable=False),
            sa.Column('rating_tech', sa.Integer(), nullable=False),
            sa.Column('rating_comm', sa.Integer(), nullable=False),
            sa.Column('feedback', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint('rating_overall BETWEEN 1 AND 5', name='ck_interview_rating_overall'),
            sa.CheckConstraint('rating_tech BETWEEN 1 AND 5', name='ck_interview_rating_tech'),
            sa.CheckConstraint('rating_comm BETWEEN 1 AND 5', name='ck_interview_rating_comm'),
            sa.ForeignKeyConstraint(['event_id'], ['recruiting_events.id'], ),
            sa.ForeignKeyConstraint(['recruiter_id'], ['app_users.id'], ),
            sa.ForeignKeyConstraint(['student_id'], ['students.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('event_id', 'student_id', 'recruiter_id', name='uq_interview_event_student_recruiter')
        )
        op.create_index(op.f('ix_interviews_event_id'), 'interviews', ['event_id'], unique=False)
        op.create_index(op.f('ix_interviews_student_id'), 'interviews', ['student_id'], unique=False)
        op.create_index(op.f('ix_interviews_recruiter_id'), 'interviews', ['recruiter_id'], unique=False)


def downgrade() -> None:
    op.drop_table('interviews')
    op.drop_table('students')
    op.drop_table('recruiting_events')
    op.drop_table('app_users')
    op.drop_table('auth_users')
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
