"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates all database tables for Classboard:
- classrooms: Classroom aggregate with hashed credentials and token slot
- students: Students owned by a classroom (cascade on delete)
- score_records: Append-only archived scores per student

Also creates indexes for common query patterns.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Classrooms Table ──────────────────────────────────────
    op.create_table(
        'classrooms',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('password_salt', sa.String(64), nullable=False),
        sa.Column('teacher_token', sa.String(64), nullable=True),
        sa.Column('secret_question', sa.Text(), nullable=False),
        sa.Column('secret_answer_hash', sa.Text(), nullable=False),
        sa.Column('secret_answer_salt', sa.String(64), nullable=False),
        sa.Column('announcement', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('classroom_id', sa.String(32),
                  sa.ForeignKey('classrooms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('access_code', sa.String(4), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('score', sa.Numeric(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('classroom_id', 'access_code',
                            name='uq_students_classroom_access_code'),
    )
    op.create_index('ix_students_classroom_id', 'students', ['classroom_id'])

    # ── Score Records Table ───────────────────────────────────
    op.create_table(
        'score_records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.String(32),
                  sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('score', sa.Numeric(), nullable=False),
    )
    op.create_index('ix_score_records_student_id', 'score_records', ['student_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_score_records_student_id', table_name='score_records')
    op.drop_table('score_records')
    op.drop_index('ix_students_classroom_id', table_name='students')
    op.drop_table('students')
    op.drop_table('classrooms')
