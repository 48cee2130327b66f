"""Attendance API router."""

import logging
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_attendance.auth.dependencies import get_current_user
from crm_attendance.auth.schemas import CurrentUser
from crm_attendance.core.datetime_utils import local_day, now_local, one_month_before
from crm_attendance.core.exceptions import ServiceError
from crm_attendance.db.session import get_db

from . import service, stats
from .schemas import (
    AllMembersSnapshot,
    AttendanceMarkRequest,
    AttendanceMessageResponse,
    AttendanceUpdateRequest,
    TeamAttendanceResponse,
    TeamSummary,
    UserAttendanceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


def _error_response(e: ServiceError) -> HTTPException:
    if e.error:
        return HTTPException(status_code=e.status_code, detail={"message": e.message, "error": e.error})
    return HTTPException(status_code=e.status_code, detail=e.message)


def _internal_error(message: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(e)},
    )


def _day_or_today(value: Optional[datetime]) -> date:
    return local_day(value) if value else now_local().date()


@router.post("/mark", response_model=AttendanceMessageResponse)
async def mark_attendance(
    payload: AttendanceMarkRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create or update a member's attendance for the day."""
    try:
        attendance = await service.mark_attendance(db, payload, current_user.id)
        return AttendanceMessageResponse(message="Attendance marked successfully", attendance=attendance)
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error marking attendance")
        raise _internal_error("Error marking attendance", e)


@router.get("/user/{user_id}", response_model=UserAttendanceResponse)
async def get_user_attendance(
    user_id: UUID,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """User's records in a date range (default: the last month) with statistics."""
    end_day = _day_or_today(end_date)
    start_day = local_day(start_date) if start_date else one_month_before(now_local().date())
    try:
        await service.get_user_or_404(db, user_id)
        records = await service.get_user_attendance(db, user_id, start_day, end_day)
        statistics = await stats.get_user_stats(db, user_id, start_day, end_day)
        return UserAttendanceResponse(attendance=records, statistics=statistics)
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error fetching attendance")
        raise _internal_error("Error fetching attendance", e)


@router.get("/team/{team_id}", response_model=TeamAttendanceResponse)
async def get_team_attendance(
    team_id: UUID,
    att_date: Optional[datetime] = Query(None, alias="date", description="Attendance date"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Team records for one day with a per-status breakdown."""
    day = _day_or_today(att_date)
    try:
        await service.get_team_or_404(db, team_id)
        records = await service.get_team_attendance(db, team_id, day)
        statistics = await stats.get_team_daily_stats(db, team_id, day)
        return TeamAttendanceResponse(attendance=records, statistics=statistics)
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error fetching team attendance")
        raise _internal_error("Error fetching team attendance", e)


@router.get("/teams/summary", response_model=List[TeamSummary])
async def get_all_teams_attendance(
    att_date: Optional[datetime] = Query(None, alias="date", description="Attendance date"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Per-status breakdown of every team for one day."""
    try:
        return await stats.get_all_teams_summary(db, _day_or_today(att_date))
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error fetching teams attendance")
        raise _internal_error("Error fetching teams attendance", e)


@router.get("/all-members", response_model=AllMembersSnapshot)
async def get_all_members_attendance(
    att_date: Optional[datetime] = Query(None, alias="date", description="Attendance date"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Snapshot of every user for one day, absent placeholders included."""
    try:
        return await stats.get_all_members_snapshot(db, _day_or_today(att_date))
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error fetching members attendance")
        raise _internal_error("Error fetching members attendance", e)


@router.patch("/{attendance_id}", response_model=AttendanceMessageResponse)
async def update_attendance(
    attendance_id: UUID,
    payload: AttendanceUpdateRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Partially update a record; only check times, status, notes and leave reason are applied."""
    try:
        attendance = await service.update_attendance(
            db,
            attendance_id,
            payload.model_dump(exclude_unset=True),
            current_user.id,
        )
        return AttendanceMessageResponse(message="Attendance updated successfully", attendance=attendance)
    except ServiceError as e:
        raise _error_response(e)
    except Exception as e:
        logger.exception("Error updating attendance")
        raise _internal_error("Error updating attendance", e)
