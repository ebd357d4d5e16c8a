"""
Custom exception classes and error handling.

Provides consistent error responses across the API. Every APIException is
rendered as {"detail": ..., "error_code": ...} by the handler in main.py.

Errors raised before a reflection is committed are surfaced to the caller
through these classes. Failures in background analysis generation never are
(see services.model_gateway.ModelError).
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception with consistent structure."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """Resource not found."""

    def __init__(self, detail: str, error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )


class ValidationError(APIException):
    """A required field is missing or blank."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )
        self.field = field


class UnauthorizedError(APIException):
    """Authentication required or failed."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ConflictError(APIException):
    """Resource conflict (e.g., a second reflection for the same day)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


def require_fields(values: Dict[str, Optional[str]], messages: Dict[str, str]) -> None:
    """
    Raise ValidationError for the first field in `messages` whose value is
    missing or whitespace-only. Field order follows `messages`.
    """
    for field, message in messages.items():
        value = values.get(field)
        if value is None or not str(value).strip():
            raise ValidationError(message, field=field)
