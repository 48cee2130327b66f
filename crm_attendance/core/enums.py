from enum import Enum


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class UserRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"
