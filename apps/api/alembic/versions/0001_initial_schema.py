"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the tenant tables in dependency order:
schools, auth_accounts, classes, users, attendance, announcements, email_logs.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS: dict[str, tuple[str, ...]] = {
    "subscription_tier": ("free", "basic", "premium"),
    "user_role": (
        "school_admin",
        "sub_admin",
        "teacher",
        "student",
        "parent",
        "receptionist",
        "accountant",
        "librarian",
    ),
    "auth_status": ("pending", "complete", "error"),
    "attendance_status": ("present", "absent", "late", "excused"),
    "announcement_priority": ("low", "medium", "high"),
    "announcement_status": ("draft", "published", "archived"),
    "email_type": ("welcome", "password_reset", "announcement", "bulk_notification"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).create(bind, checkfirst=True)

    op.create_table(
        "schools",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("admin_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("settings", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("subscription_tier", _enum("subscription_tier"), nullable=False, server_default="free"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_schools_name"), "schools", ["name"], unique=False)
    op.create_index(op.f("ix_schools_admin_id"), "schools", ["admin_id"], unique=False)

    op.create_table(
        "auth_accounts",
        *_base_columns(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_auth_accounts_email"), "auth_accounts", ["email"], unique=True)

    op.create_table(
        "classes",
        *_base_columns(),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=True),
        sa.Column("grade", sa.String(length=20), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("room", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("academic_year", sa.String(length=20), nullable=True),
        sa.Column("subjects", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("class_teacher_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_classes_school_id"), "classes", ["school_id"], unique=False)
    op.create_index(op.f("ix_classes_class_teacher_id"), "classes", ["class_teacher_id"], unique=False)

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("profile", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("class_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("admission_number", sa.String(length=50), nullable=True),
        sa.Column("parent_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("children_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("auth_status", _enum("auth_status"), nullable=False, server_default="complete"),
        sa.Column("temp_password", sa.String(length=64), nullable=True),
        sa.Column("temp_password_sent", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("error_log", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_school_id"), "users", ["school_id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=False)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_class_id"), "users", ["class_id"], unique=False)

    op.create_table(
        "attendance",
        *_base_columns(),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("class_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", _enum("attendance_status"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("marked_by", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("marked_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("class_id", "student_id", "date", name="uq_attendance_class_student_date"),
    )
    op.create_index(op.f("ix_attendance_school_id"), "attendance", ["school_id"], unique=False)
    op.create_index(op.f("ix_attendance_student_id"), "attendance", ["student_id"], unique=False)
    op.create_index("ix_attendance_class_date", "attendance", ["class_id", "date"], unique=False)

    op.create_table(
        "announcements",
        *_base_columns(),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("author_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("author_name", sa.String(length=200), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("target_audience", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("priority", _enum("announcement_priority"), nullable=False, server_default="medium"),
        sa.Column("status", _enum("announcement_status"), nullable=False, server_default="published"),
        sa.Column("publish_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attachments", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("email_stats", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_announcements_school_id"), "announcements", ["school_id"], unique=False)
    op.create_index(op.f("ix_announcements_author_id"), "announcements", ["author_id"], unique=False)

    op.create_table(
        "email_logs",
        *_base_columns(),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("announcement_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("type", _enum("email_type"), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.Column("subject", sa.String(length=500), nullable=True),
        sa.Column("sent_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("message_id", sa.String(length=255), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_email_logs_school_id"), "email_logs", ["school_id"], unique=False)
    op.create_index(op.f("ix_email_logs_user_id"), "email_logs", ["user_id"], unique=False)
    op.create_index(op.f("ix_email_logs_sent_at"), "email_logs", ["sent_at"], unique=False)


def downgrade() -> None:
    for table in (
        "email_logs",
        "announcements",
        "attendance",
        "users",
        "classes",
        "auth_accounts",
        "schools",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        _enum(name).drop(bind, checkfirst=True)
