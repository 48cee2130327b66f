import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from crm_attendance.core.enums import AttendanceStatus
from crm_attendance.db.session import Base

FULL_DAY_HOURS = 8
HALF_DAY_HOURS = 4


def round_hours(hours: float) -> float:
    """Round to 2 decimals, halves away from zero (8.125 -> 8.13)."""
    return float(Decimal(str(hours or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def work_hours_between(check_in: datetime, check_out: datetime) -> float:
    """Hours between check-in and check-out, rounded to 2 decimals."""
    return round_hours((check_out - check_in).total_seconds() / 3600)


def status_for_hours(hours: float, current: Optional[str]) -> Optional[str]:
    """Status implied by worked hours. Below a half day the current status is kept."""
    if hours >= FULL_DAY_HOURS:
        return AttendanceStatus.PRESENT.value
    if hours >= HALF_DAY_HOURS:
        return AttendanceStatus.HALF_DAY.value
    return current


class Attendance(Base):
    """Attendance record: one per user per calendar day."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
        Index("ix_attendance_team_date", "team_id", "date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Team at the time of marking; not updated when the user changes team
    team_id = Column(Uuid(as_uuid=True), ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False)
    date = Column(Date, nullable=False)

    # Naive server-local timestamps
    check_in_time = Column(DateTime, nullable=True)
    check_in_latitude = Column(Float, nullable=True)
    check_in_longitude = Column(Float, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    check_out_latitude = Column(Float, nullable=True)
    check_out_longitude = Column(Float, nullable=True)

    status = Column(String(20), nullable=False, default=AttendanceStatus.ABSENT.value)  # present, absent, half-day, leave
    work_hours = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    leave_reason = Column(Text, nullable=True)
    # False is reserved for self-marked entries awaiting approval
    is_approved = Column(Boolean, nullable=False, default=True)
    marked_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def apply_derived_fields(self) -> None:
        """Recompute work_hours and status when both check times are known.

        The derived status wins over an explicitly set one; an explicit status
        only sticks while a check time is missing.
        """
        if self.check_in_time is None or self.check_out_time is None:
            return
        self.work_hours = work_hours_between(self.check_in_time, self.check_out_time)
        self.status = status_for_hours(self.work_hours, self.status)
