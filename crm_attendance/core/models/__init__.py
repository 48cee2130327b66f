from crm_attendance.core.models.team import Team
from crm_attendance.core.models.attendance import Attendance

# Users live in the auth package; registered here so every mapper resolves
from crm_attendance.auth.models import User

__all__ = [
    "Attendance",
    "Team",
    "User",
]
