from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error


class InvalidInputError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class TeamNotFoundError(NotFoundError):
    def __init__(self, message: str = "Team not found") -> None:
        super().__init__(message)


class AttendanceNotFoundError(NotFoundError):
    def __init__(self, message: str = "Attendance record not found") -> None:
        super().__init__(message)


class BusinessRuleViolation(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NoTeamAssignedError(BusinessRuleViolation):
    def __init__(self, message: str = "User is not assigned to any team") -> None:
        super().__init__(message)


class InternalError(ServiceError):
    """Unexpected failure; `error` carries the underlying message."""

    def __init__(self, message: str, error: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, error=error)


class ConstraintViolationError(InternalError):
    """Raised by the store when an insert would duplicate a (user, day) record."""

    def __init__(self, message: str, error: Optional[str] = None) -> None:
        super().__init__(message, error=error)
