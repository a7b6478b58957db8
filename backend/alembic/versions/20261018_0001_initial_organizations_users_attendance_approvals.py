"""initial: organizations, users, attendance_records, approval_items

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_json = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")
_big_id = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    # --- organizations ---
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "client", "employee", "contractor", name="user_role"),
            nullable=False,
            server_default="employee",
        ),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("scheduled_start", sa.String(5), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    # --- attendance_records ---
    op.create_table(
        "attendance_records",
        sa.Column("id", _big_id, autoincrement=True, nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "check_in_method",
            sa.Enum("manual", "qr", "biometric", name="check_in_method"),
            nullable=True,
        ),
        sa.Column("check_in_location", _json, nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "check_out_method",
            sa.Enum("manual", "qr", "biometric", name="check_out_method"),
            nullable=True,
        ),
        sa.Column("check_out_location", _json, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "not_checked", "present", "late", "half_day", "absent",
                name="attendance_status",
            ),
            nullable=False,
            server_default="not_checked",
        ),
        sa.Column("working_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("overtime_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["subject_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subject_id", "work_date", name="uq_attendance_subject_day"),
        sa.CheckConstraint(
            "check_out_time IS NULL OR check_out_time >= check_in_time",
            name="ck_attendance_checkout_after_checkin",
        ),
        sa.CheckConstraint(
            "working_hours >= 0 AND overtime_hours >= 0",
            name="ck_attendance_hours_non_negative",
        ),
    )
    op.create_index(
        "ix_attendance_org_day", "attendance_records", ["organization_id", "work_date"]
    )
    op.create_index("ix_attendance_status", "attendance_records", ["status"])

    # --- approval_items ---
    op.create_table(
        "approval_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "type",
            sa.Enum("payroll", "leave", "contract", name="approval_type"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subject_id", sa.Uuid(), nullable=True),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=True),
        sa.Column("days", sa.Float(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", name="approval_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("resolved_by", sa.Uuid(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolution_note", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["subject_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["resolved_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(type = 'payroll' AND days IS NULL)"
            " OR (type = 'leave' AND amount IS NULL)"
            " OR (type = 'contract' AND amount IS NULL AND days IS NULL)",
            name="ck_approval_payload_by_type",
        ),
    )
    op.create_index(
        "ix_approval_org_status_created",
        "approval_items",
        ["organization_id", "status", "created_at"],
    )
    op.create_index("ix_approval_type", "approval_items", ["type"])


def downgrade() -> None:
    op.drop_index("ix_approval_type", table_name="approval_items")
    op.drop_index("ix_approval_org_status_created", table_name="approval_items")
    op.drop_table("approval_items")
    op.drop_index("ix_attendance_status", table_name="attendance_records")
    op.drop_index("ix_attendance_org_day", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_table("users")
    op.drop_table("organizations")
    op.execute("DROP TYPE IF EXISTS approval_status")
    op.execute("DROP TYPE IF EXISTS approval_type")
    op.execute("DROP TYPE IF EXISTS attendance_status")
    op.execute("DROP TYPE IF EXISTS check_out_method")
    op.execute("DROP TYPE IF EXISTS check_in_method")
    op.execute("DROP TYPE IF EXISTS user_role")
