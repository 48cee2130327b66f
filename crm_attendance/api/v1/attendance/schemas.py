from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from crm_attendance.core.enums import AttendanceStatus


class CamelModel(BaseModel):
    """JSON in and out uses camelCase keys; snake_case is accepted on input too."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ----- Requests -----
class CheckPoint(CamelModel):
    """A check-in or check-out event, optionally geotagged."""

    time: datetime
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class AttendanceMarkRequest(CamelModel):
    """Create or update the attendance of one member for one day."""

    member_id: UUID
    date: datetime = Field(..., description="Any timestamp within the day; YYYY-MM-DD accepted")
    check_in: Optional[Union[CheckPoint, datetime]] = None
    check_out: Optional[Union[CheckPoint, datetime]] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    leave_reason: Optional[str] = None


class AttendanceUpdateRequest(CamelModel):
    """Partial update of a record by id. Unknown keys are ignored."""

    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    leave_reason: Optional[str] = None


# ----- Records -----
class UserBrief(CamelModel):
    id: UUID
    name: str
    email: str
    role: str


class CheckPointResponse(CamelModel):
    time: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_columns(
        cls,
        time: Optional[datetime],
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Optional["CheckPointResponse"]:
        if time is None:
            return None
        return cls(time=time, latitude=latitude, longitude=longitude)


class AttendanceRecordResponse(CamelModel):
    """Single attendance record enriched with the member's display fields."""

    id: UUID
    user_id: UUID
    user: Optional[UserBrief] = None
    team_id: UUID
    date: date
    check_in: Optional[CheckPointResponse] = None
    check_out: Optional[CheckPointResponse] = None
    status: str
    work_hours: float
    notes: Optional[str] = None
    leave_reason: Optional[str] = None
    is_approved: bool
    marked_by: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttendanceMessageResponse(CamelModel):
    message: str
    attendance: AttendanceRecordResponse


# ----- Statistics -----
class UserAttendanceStats(CamelModel):
    """Range statistics for one user; all zero when no records match."""

    total_days: int = 0
    present_days: int = 0
    half_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    total_work_hours: float = 0
    avg_work_hours: float = 0


class StatusBreakdown(CamelModel):
    status: str
    count: int
    total_work_hours: float


class UserAttendanceResponse(CamelModel):
    attendance: List[AttendanceRecordResponse]
    statistics: UserAttendanceStats


class TeamAttendanceResponse(CamelModel):
    attendance: List[AttendanceRecordResponse]
    statistics: List[StatusBreakdown]


class TeamSummary(CamelModel):
    team_id: UUID
    team_name: str
    statistics: List[StatusBreakdown]


# ----- All members snapshot -----
class TeamRef(CamelModel):
    id: UUID
    name: str


class MemberDayAttendance(CamelModel):
    """The day's record for a member, or an absent placeholder."""

    status: str
    check_in: Optional[CheckPointResponse] = None
    check_out: Optional[CheckPointResponse] = None
    work_hours: float = 0
    notes: Optional[str] = None
    leave_reason: Optional[str] = None


class MemberDailyFlags(CamelModel):
    present: bool
    half_day: bool
    absent: bool
    leave: bool
    work_hours: float


class MemberSnapshot(CamelModel):
    user_id: UUID
    name: str
    email: str
    team: Optional[TeamRef] = None
    attendance: MemberDayAttendance
    daily_stats: MemberDailyFlags


class OverallStats(CamelModel):
    total_employees: int = 0
    present_count: int = 0
    half_day_count: int = 0
    absent_count: int = 0
    leave_count: int = 0
    total_work_hours: float = 0
    avg_work_hours: float = 0


class AllMembersSnapshot(CamelModel):
    date: date
    overall_stats: OverallStats
    members: List[MemberSnapshot]
