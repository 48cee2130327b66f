"""Attendance record store: keyed lookups and persistence.

Every persist recomputes the derived fields (work hours, status) before commit.
Uniqueness of (user, day) is enforced by the database; inserts never merge.
"""

import logging
from datetime import date
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm_attendance.core.exceptions import AttendanceNotFoundError, ConstraintViolationError
from crm_attendance.core.models import Attendance

logger = logging.getLogger(__name__)


async def find_by_id(db: AsyncSession, attendance_id: UUID) -> Attendance:
    record = await db.get(Attendance, attendance_id)
    if not record:
        raise AttendanceNotFoundError()
    return record


async def find_by_user_and_day(db: AsyncSession, user_id: UUID, day: date) -> Optional[Attendance]:
    result = await db.execute(
        select(Attendance).where(Attendance.user_id == user_id, Attendance.date == day)
    )
    return result.scalar_one_or_none()


async def find_by_user_and_day_range(
    db: AsyncSession, user_id: UUID, start_day: date, end_day: date
) -> List[Attendance]:
    """Records of a user within [start_day, end_day], newest first."""
    result = await db.execute(
        select(Attendance)
        .where(
            Attendance.user_id == user_id,
            Attendance.date >= start_day,
            Attendance.date <= end_day,
        )
        .order_by(Attendance.date.desc())
    )
    return list(result.scalars().all())


async def find_by_team_and_day_range(
    db: AsyncSession, team_id: UUID, start_day: date, end_day: date
) -> List[Attendance]:
    result = await db.execute(
        select(Attendance)
        .where(
            Attendance.team_id == team_id,
            Attendance.date >= start_day,
            Attendance.date <= end_day,
        )
        .order_by(Attendance.date, Attendance.created_at)
    )
    return list(result.scalars().all())


async def find_by_day(db: AsyncSession, day: date) -> List[Attendance]:
    result = await db.execute(select(Attendance).where(Attendance.date == day))
    return list(result.scalars().all())


async def insert(db: AsyncSession, record: Attendance) -> Attendance:
    """Insert a new record. A duplicate (user, day) raises ConstraintViolationError."""
    user_id, day = record.user_id, record.date
    record.apply_derived_fields()
    db.add(record)
    try:
        await db.commit()
    except IntegrityError as e:
        logger.error("Duplicate attendance for user %s on %s", user_id, day)
        await db.rollback()
        raise ConstraintViolationError(
            "Attendance already exists for this user and day",
            error=str(e.orig),
        )
    await db.refresh(record)
    return record


async def update_by_id(
    db: AsyncSession, attendance_id: UUID, changes: Mapping[str, Any]
) -> Attendance:
    """Apply column changes to an existing record and persist it."""
    record = await find_by_id(db, attendance_id)
    for column, value in changes.items():
        setattr(record, column, value)
    record.apply_derived_fields()
    await db.commit()
    await db.refresh(record)
    return record
