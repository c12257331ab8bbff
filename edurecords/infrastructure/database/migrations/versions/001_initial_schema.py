# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial records database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-02-03
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create records database tables."""
    # =========================================================================
    # ACCOUNTS & CATALOG
    # =========================================================================

    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("student_number", sa.String(50), unique=True, nullable=True),
        sa.Column("credits_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("academic_level", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "role IN ('admin', 'faculty', 'student')",
            name="ck_users_role",
        ),
    )

    op.create_table(
        "courses",
        _id_column(),
        sa.Column("code", sa.String(20), unique=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("credits", sa.Integer, nullable=False),
        sa.Column("semester", sa.Integer, nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column(
            "skills",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("max_enrollment", sa.Integer, nullable=False, server_default="60"),
        sa.Column("active_enrollment_count", sa.Integer, nullable=False, server_default="0"),
        *_timestamp_columns(),
        sa.CheckConstraint("credits >= 0", name="ck_courses_credits_nonneg"),
        sa.CheckConstraint(
            "active_enrollment_count >= 0",
            name="ck_courses_active_count_nonneg",
        ),
    )

    # =========================================================================
    # ENROLLMENT & GRADING
    # =========================================================================

    op.create_table(
        "enrollments",
        _id_column(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("progress_percentage", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "completed_modules",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("credits_awarded", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dropped_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        sa.CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_enrollments_progress_range",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'completed', 'dropped')",
            name="ck_enrollments_status",
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "grades",
        _id_column(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "enrollment_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("enrollments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "graded_by",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("marks_obtained", sa.Float, nullable=False),
        sa.Column("assessment_type", sa.String(20), nullable=False, server_default="final"),
        sa.Column("letter_grade", sa.String(4), nullable=False),
        sa.Column("grade_point", sa.Float, nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "marks_obtained >= 0 AND marks_obtained <= 100",
            name="ck_grades_marks_range",
        ),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_course_id", "grades", ["course_id"])
    op.create_index("ix_grades_enrollment_id", "grades", ["enrollment_id"])

    # =========================================================================
    # ACADEMIC RECORDS (TRANSCRIPT, CREDIT LEDGER, NEP EXITS)
    # =========================================================================

    op.create_table(
        "academic_records",
        _id_column(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
        sa.Column("total_credits_attempted", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_credits_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "skills_acquired",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("cgpa", sa.Float, nullable=False, server_default="0"),
        sa.Column("current_level", sa.String(20), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "verified_by",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        *_timestamp_columns(),
    )

    op.create_table(
        "transcript_entries",
        _id_column(),
        sa.Column(
            "record_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("academic_records.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("course_name", sa.String(200), nullable=False),
        sa.Column("course_code", sa.String(20), nullable=False),
        sa.Column("credits", sa.Integer, nullable=False),
        sa.Column("semester", sa.Integer, nullable=True),
        sa.Column(
            "skill_tags",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("marks_obtained", sa.Float, nullable=True),
        sa.Column("letter_grade", sa.String(4), nullable=True),
        sa.Column("grade_point", sa.Float, nullable=True),
        sa.Column(
            "completed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("record_id", "course_id", name="uq_transcript_entries_record_course"),
    )
    op.create_index("ix_transcript_entries_record_id", "transcript_entries", ["record_id"])

    op.create_table(
        "exit_qualifications",
        _id_column(),
        sa.Column(
            "record_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("academic_records.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column(
            "awarded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("total_credits", sa.Integer, nullable=False),
        sa.Column(
            "recorded_by",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.CheckConstraint(
            "level IN ('certificate', 'diploma', 'degree', 'postgraduate')",
            name="ck_exit_qualifications_level",
        ),
    )
    op.create_index("ix_exit_qualifications_record_id", "exit_qualifications", ["record_id"])


def downgrade() -> None:
    """Drop records database tables."""
    op.drop_table("exit_qualifications")
    op.drop_table("transcript_entries")
    op.drop_table("academic_records")
    op.drop_table("grades")
    op.drop_table("enrollments")
    op.drop_table("courses")
    op.drop_table("users")
