"""Attendance marking and partial updates."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_attendance.auth.models import User
from crm_attendance.core.datetime_utils import local_day, to_local_naive
from crm_attendance.core.enums import AttendanceStatus
from crm_attendance.core.exceptions import (
    InvalidInputError,
    NoTeamAssignedError,
    TeamNotFoundError,
    UserNotFoundError,
)
from crm_attendance.core.models import Attendance, Team

from . import store
from .schemas import (
    AttendanceMarkRequest,
    AttendanceRecordResponse,
    CheckPoint,
    CheckPointResponse,
    UserBrief,
)

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("check_in", "check_out", "status", "notes", "leave_reason")

_datetime_adapter = TypeAdapter(datetime)


def _parse_check_point(value: Any, keep_location: bool) -> Dict[str, Any]:
    """Column values for one side (check_in / check_out) of a record."""
    if value is None:
        return {"time": None, "latitude": None, "longitude": None}
    try:
        if isinstance(value, CheckPoint):
            point = value
        elif isinstance(value, Mapping):
            point = CheckPoint.model_validate(value)
        else:
            point = CheckPoint(time=_datetime_adapter.validate_python(value))
    except ValidationError as e:
        raise InvalidInputError(f"Invalid check time: {e.errors()[0]['msg']}")
    return {
        "time": to_local_naive(point.time),
        "latitude": point.latitude if keep_location else None,
        "longitude": point.longitude if keep_location else None,
    }


@dataclass
class AttendancePatch:
    """Allow-listed field changes with explicit presence.

    A field missing from `values` was omitted and must not be touched; a field
    present with None is cleared. Status is never cleared.
    """

    values: Dict[str, Any] = field(default_factory=dict)
    keep_location: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], keep_location: bool = False) -> "AttendancePatch":
        values: Dict[str, Any] = {}
        for name in PATCHABLE_FIELDS:
            if name not in raw:
                continue
            value = raw[name]
            if name == "status":
                if value is None:
                    continue
                try:
                    value = AttendanceStatus(value).value
                except ValueError:
                    raise InvalidInputError(f"Invalid status: {value}")
            values[name] = value
        return cls(values=values, keep_location=keep_location)

    def is_provided(self, name: str) -> bool:
        return name in self.values

    def to_columns(self) -> Dict[str, Any]:
        """Translate the patch into Attendance column assignments."""
        columns: Dict[str, Any] = {}
        for side in ("check_in", "check_out"):
            if self.is_provided(side):
                point = _parse_check_point(self.values[side], self.keep_location)
                columns[f"{side}_time"] = point["time"]
                columns[f"{side}_latitude"] = point["latitude"]
                columns[f"{side}_longitude"] = point["longitude"]
        for name in ("status", "notes", "leave_reason"):
            if self.is_provided(name):
                columns[name] = self.values[name]
        return columns


# ----- Response builders -----
def _user_brief(user: Optional[User]) -> Optional[UserBrief]:
    if not user:
        return None
    return UserBrief(id=user.id, name=user.name, email=user.email, role=user.role)


def build_record_response(record: Attendance, user: Optional[User]) -> AttendanceRecordResponse:
    return AttendanceRecordResponse(
        id=record.id,
        user_id=record.user_id,
        user=_user_brief(user),
        team_id=record.team_id,
        date=record.date,
        check_in=CheckPointResponse.from_columns(
            record.check_in_time, record.check_in_latitude, record.check_in_longitude
        ),
        check_out=CheckPointResponse.from_columns(
            record.check_out_time, record.check_out_latitude, record.check_out_longitude
        ),
        status=record.status,
        work_hours=record.work_hours or 0,
        notes=record.notes,
        leave_reason=record.leave_reason,
        is_approved=record.is_approved,
        marked_by=record.marked_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def _users_by_id(db: AsyncSession, user_ids: Iterable[UUID]) -> Dict[UUID, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in result.scalars().all()}


async def build_record_responses(
    db: AsyncSession, records: List[Attendance]
) -> List[AttendanceRecordResponse]:
    users = await _users_by_id(db, (r.user_id for r in records))
    return [build_record_response(r, users.get(r.user_id)) for r in records]


# ----- Directory lookups -----
async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise UserNotFoundError()
    return user


async def get_team_or_404(db: AsyncSession, team_id: UUID) -> Team:
    team = await db.get(Team, team_id)
    if not team:
        raise TeamNotFoundError()
    return team


# ----- Mark / update -----
async def mark_attendance(
    db: AsyncSession,
    payload: AttendanceMarkRequest,
    acting_user_id: UUID,
) -> AttendanceRecordResponse:
    """Create the member's record for the day or update it in place.

    Only fields present in the payload are applied; omitted fields keep their
    stored values. Exactly one write per call.
    """
    user = await get_user_or_404(db, payload.member_id)
    if user.team_id is None:
        logger.warning("Attendance not marked: user %s has no team", user.id)
        raise NoTeamAssignedError()

    day = local_day(payload.date)
    patch = AttendancePatch.from_mapping(
        payload.model_dump(exclude_unset=True), keep_location=True
    )
    changes = patch.to_columns()
    changes["marked_by"] = acting_user_id

    existing = await store.find_by_user_and_day(db, user.id, day)
    if existing:
        record = await store.update_by_id(db, existing.id, changes)
        logger.info("Updated attendance %s for user %s on %s", record.id, user.id, day)
    else:
        record = Attendance(
            user_id=user.id,
            team_id=user.team_id,
            date=day,
            work_hours=0.0,
            is_approved=True,
            **changes,
        )
        if record.status is None:
            record.status = AttendanceStatus.ABSENT.value
        record = await store.insert(db, record)
        logger.info("Created attendance %s for user %s on %s", record.id, user.id, day)

    return build_record_response(record, user)


async def update_attendance(
    db: AsyncSession,
    attendance_id: UUID,
    patch: Mapping[str, Any],
    acting_user_id: UUID,
) -> AttendanceRecordResponse:
    """Patch a record by id. Keys outside the allow-list are ignored; check
    times are stored without geolocation."""
    changes = AttendancePatch.from_mapping(patch).to_columns()
    changes["marked_by"] = acting_user_id
    record = await store.update_by_id(db, attendance_id, changes)
    logger.info("Updated attendance %s", record.id)
    user = await db.get(User, record.user_id)
    return build_record_response(record, user)


# ----- Listings -----
async def get_user_attendance(
    db: AsyncSession, user_id: UUID, start_day: date, end_day: date
) -> List[AttendanceRecordResponse]:
    records = await store.find_by_user_and_day_range(db, user_id, start_day, end_day)
    return await build_record_responses(db, records)


async def get_team_attendance(
    db: AsyncSession, team_id: UUID, day: date
) -> List[AttendanceRecordResponse]:
    records = await store.find_by_team_and_day_range(db, team_id, day, day)
    return await build_record_responses(db, records)
