import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

USER_ROLES = ("admin", "client", "employee", "contractor")
SUBJECT_ROLES = ("employee", "contractor")
ADMINISTRATOR_ROLES = ("admin", "client")
ATTENDANCE_METHODS = ("manual", "qr", "biometric")
ATTENDANCE_STATUSES = ("not_checked", "present", "late", "half_day", "absent")
APPROVAL_TYPES = ("payroll", "leave", "contract")
APPROVAL_STATUSES = ("pending", "approved", "rejected")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime that always comes back as UTC (SQLite drops tzinfo)."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


_Json = JSON().with_variant(JSONB(), "postgresql")
_BigId = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    pass


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    users: Mapped[list["User"]] = relationship(
        "User", back_populates="organization", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name}>"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        Enum(*USER_ROLES, name="user_role"),
        nullable=False,
        default="employee",
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
    )
    # HH:MM, overrides settings.SCHEDULED_START_TIME
    scheduled_start: Mapped[str | None] = mapped_column(String(5), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    organization: Mapped["Organization | None"] = relationship(
        "Organization", back_populates="users", lazy="raise"
    )

    @property
    def is_global_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username} role={self.role}>"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    __table_args__ = (
        UniqueConstraint("subject_id", "work_date", name="uq_attendance_subject_day"),
        CheckConstraint(
            "check_out_time IS NULL OR check_out_time >= check_in_time",
            name="ck_attendance_checkout_after_checkin",
        ),
        CheckConstraint(
            "working_hours >= 0 AND overtime_hours >= 0",
            name="ck_attendance_hours_non_negative",
        ),
        Index("ix_attendance_org_day", "organization_id", "work_date"),
        Index("ix_attendance_status", "status"),
    )

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)

    check_in_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    check_in_method: Mapped[str | None] = mapped_column(
        Enum(*ATTENDANCE_METHODS, name="check_in_method"), nullable=True
    )
    check_in_location: Mapped[dict | None] = mapped_column(_Json, nullable=True)

    check_out_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    check_out_method: Mapped[str | None] = mapped_column(
        Enum(*ATTENDANCE_METHODS, name="check_out_method"), nullable=True
    )
    check_out_location: Mapped[dict | None] = mapped_column(_Json, nullable=True)

    status: Mapped[str] = mapped_column(
        Enum(*ATTENDANCE_STATUSES, name="attendance_status"),
        nullable=False,
        default="not_checked",
    )
    working_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    overtime_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<AttendanceRecord id={self.id} subject_id={self.subject_id} "
            f"work_date={self.work_date} status={self.status}>"
        )


class ApprovalItem(Base):
    __tablename__ = "approval_items"

    __table_args__ = (
        CheckConstraint(
            "(type = 'payroll' AND days IS NULL)"
            " OR (type = 'leave' AND amount IS NULL)"
            " OR (type = 'contract' AND amount IS NULL AND days IS NULL)",
            name="ck_approval_payload_by_type",
        ),
        Index("ix_approval_org_status_created", "organization_id", "status", "created_at"),
        Index("ix_approval_type", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[str] = mapped_column(Enum(*APPROVAL_TYPES, name="approval_type"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    days: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(*APPROVAL_STATUSES, name="approval_status"),
        nullable=False,
        default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    resolution_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ApprovalItem id={self.id} type={self.type} status={self.status}>"
