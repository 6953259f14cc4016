"""Structured error helpers for API responses.

Every engine failure carries a stable ``code`` plus ``details`` (counts, ids)
so callers can decide whether a retry makes sense without parsing messages.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(code, message, details)


class AttemptLimitReached(AppError):
    def __init__(self, attempts_allowed: int, attempts_used: int):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "ATTEMPT_LIMIT_REACHED",
            "Attempt limit reached for this competency",
            {"attempts_allowed": attempts_allowed, "attempts_used": attempts_used, "attempts_left": 0},
        )


class InsufficientQuestions(AppError):
    def __init__(self, found: int, required: int, competency_id: Any = None, strategy: Optional[str] = None):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "INSUFFICIENT_QUESTIONS",
            f"Not enough questions available. Found {found} questions, need at least {required}.",
            {
                "found": found,
                "required": required,
                "competency_id": str(competency_id) if competency_id is not None else None,
                "strategy": strategy,
            },
        )


class SessionNotFound(AppError):
    def __init__(self, session_id: Any):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "SESSION_NOT_FOUND",
            "Assessment session not found",
            {"session_id": str(session_id)},
        )


class SessionNotInProgress(AppError):
    def __init__(self, session_id: Any, current_status: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "SESSION_NOT_IN_PROGRESS",
            "Assessment session is not in progress",
            {"session_id": str(session_id), "status": current_status},
        )


class ResultNotFound(AppError):
    def __init__(self, user_id: str, competency_id: Any):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "RESULT_NOT_FOUND",
            "No completed assessment found for this competency",
            {"user_id": user_id, "competency_id": str(competency_id)},
        )


class ValidationError(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def request_validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's body/path validation failures in the same error shape."""
    fields = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    payload = build_error_payload("VALIDATION_ERROR", "Request validation failed", {"fields": fields})
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(status_code, code, message, details)
