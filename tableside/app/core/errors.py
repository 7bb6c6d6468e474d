"""
Error taxonomy for the reservation API.

Every failure a request can end with carries its HTTP status and a
user-facing message; main.py renders them as {"error": message}.
"""
from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """Malformed, missing or disallowed fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class BusinessRuleError(ApiError):
    """Well-formed input that breaks a restaurant rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


class ServiceUnavailableError(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


MSG_DATABASE_ERROR = "Database error"
MSG_REDIS_UNAVAILABLE = "Redis unavailable"
