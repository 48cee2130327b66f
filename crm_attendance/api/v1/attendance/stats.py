"""Read-only attendance statistics for users, teams and the whole organization."""

from datetime import date
from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crm_attendance.auth.models import User
from crm_attendance.core.enums import AttendanceStatus
from crm_attendance.core.models import Attendance, Team
from crm_attendance.core.models.attendance import round_hours

from . import store
from .schemas import (
    AllMembersSnapshot,
    CheckPointResponse,
    MemberDailyFlags,
    MemberDayAttendance,
    MemberSnapshot,
    OverallStats,
    StatusBreakdown,
    TeamRef,
    TeamSummary,
    UserAttendanceStats,
)


async def get_user_stats(
    db: AsyncSession, user_id: UUID, start_day: date, end_day: date
) -> UserAttendanceStats:
    """Status counts and work hours of a user over [start_day, end_day]."""
    stmt = (
        select(
            Attendance.status,
            func.count(Attendance.id),
            func.coalesce(func.sum(Attendance.work_hours), 0),
        )
        .where(
            Attendance.user_id == user_id,
            Attendance.date >= start_day,
            Attendance.date <= end_day,
        )
        .group_by(Attendance.status)
    )
    result = await db.execute(stmt)
    counts: Dict[str, int] = {}
    total_hours = 0.0
    for status_val, cnt, hours in result.all():
        counts[status_val] = cnt
        total_hours += float(hours)
    total_days = sum(counts.values())
    return UserAttendanceStats(
        total_days=total_days,
        present_days=counts.get(AttendanceStatus.PRESENT.value, 0),
        half_days=counts.get(AttendanceStatus.HALF_DAY.value, 0),
        absent_days=counts.get(AttendanceStatus.ABSENT.value, 0),
        leave_days=counts.get(AttendanceStatus.LEAVE.value, 0),
        total_work_hours=round_hours(total_hours),
        # Averaged over every matched record, zero-hour days included
        avg_work_hours=round_hours(total_hours / total_days) if total_days else 0,
    )


async def get_team_daily_stats(db: AsyncSession, team_id: UUID, day: date) -> List[StatusBreakdown]:
    """Per-status count and hours for a team on one day. Statuses without records are omitted."""
    stmt = (
        select(
            Attendance.status,
            func.count(Attendance.id),
            func.coalesce(func.sum(Attendance.work_hours), 0),
        )
        .where(Attendance.team_id == team_id, Attendance.date == day)
        .group_by(Attendance.status)
        .order_by(Attendance.status)
    )
    result = await db.execute(stmt)
    return [
        StatusBreakdown(status=status_val, count=cnt, total_work_hours=round_hours(float(hours)))
        for status_val, cnt, hours in result.all()
    ]


async def get_all_teams_summary(db: AsyncSession, day: date) -> List[TeamSummary]:
    result = await db.execute(select(Team).order_by(Team.team_name))
    summaries = []
    for team in result.scalars().all():
        summaries.append(
            TeamSummary(
                team_id=team.id,
                team_name=team.team_name,
                statistics=await get_team_daily_stats(db, team.id, day),
            )
        )
    return summaries


def _member_day(record: Attendance) -> MemberDayAttendance:
    return MemberDayAttendance(
        status=record.status,
        check_in=CheckPointResponse.from_columns(
            record.check_in_time, record.check_in_latitude, record.check_in_longitude
        ),
        check_out=CheckPointResponse.from_columns(
            record.check_out_time, record.check_out_latitude, record.check_out_longitude
        ),
        work_hours=record.work_hours or 0,
        notes=record.notes,
        leave_reason=record.leave_reason,
    )


async def get_all_members_snapshot(db: AsyncSession, day: date) -> AllMembersSnapshot:
    """Every user's attendance for the day, absent placeholders included, plus an org rollup."""
    stmt = (
        select(User)
        .options(selectinload(User.team))
        .order_by(User.name)
        .execution_options(populate_existing=True)
    )
    users = (await db.execute(stmt)).scalars().all()
    records = {r.user_id: r for r in await store.find_by_day(db, day)}

    members: List[MemberSnapshot] = []
    overall = OverallStats()
    for user in users:
        record = records.get(user.id)
        if record:
            attendance = _member_day(record)
        else:
            attendance = MemberDayAttendance(status=AttendanceStatus.ABSENT.value, work_hours=0)
        flags = MemberDailyFlags(
            present=attendance.status == AttendanceStatus.PRESENT.value,
            half_day=attendance.status == AttendanceStatus.HALF_DAY.value,
            absent=attendance.status == AttendanceStatus.ABSENT.value,
            leave=attendance.status == AttendanceStatus.LEAVE.value,
            work_hours=attendance.work_hours,
        )
        members.append(
            MemberSnapshot(
                user_id=user.id,
                name=user.name,
                email=user.email,
                team=TeamRef(id=user.team.id, name=user.team.team_name) if user.team else None,
                attendance=attendance,
                daily_stats=flags,
            )
        )

        overall.total_employees += 1
        overall.present_count += int(flags.present)
        overall.half_day_count += int(flags.half_day)
        overall.absent_count += int(flags.absent)
        overall.leave_count += int(flags.leave)
        overall.total_work_hours += flags.work_hours

    overall.total_work_hours = round_hours(overall.total_work_hours)
    if overall.total_employees:
        overall.avg_work_hours = round_hours(overall.total_work_hours / overall.total_employees)

    return AllMembersSnapshot(date=day, overall_stats=overall, members=members)
