"""
Custom exception hierarchy for the DishDisplay rewards API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The rules engine never raises for expected business outcomes; it returns
RateLimitResult / ContentValidation values and the routers translate the
failures into the exceptions below.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DishDisplayException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ReviewContentError(DishDisplayException):
    """Rating or review text failed content validation."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "REVIEW_VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        super().__init__(message=reason, details={"field": field})


class RateLimitExceededError(DishDisplayException):
    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"

    def __init__(self, reason: str, can_retry: bool, retry_after: Optional[int] = None):
        details: dict[str, Any] = {"can_retry": can_retry}
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message=reason, details=details)


class DataUnavailableError(DishDisplayException):
    """The store could not supply the data a computation needs."""
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "The rewards store is unavailable. Try again later."):
        super().__init__(message=message)


class NoActivePeriodError(DataUnavailableError):
    code = "NO_ACTIVE_PERIOD"

    def __init__(self):
        super().__init__(
            message="There is no active competition period. Run period management to open one.",
        )


class DinerNotFoundError(DishDisplayException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "DINER_NOT_FOUND"

    def __init__(self, email: str):
        super().__init__(
            message=f"No diner profile exists for {email}.",
            details={"email": email},
        )


class ReviewNotFoundError(DishDisplayException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "REVIEW_NOT_FOUND"

    def __init__(self, review_id: int):
        super().__init__(
            message=f"Review {review_id} does not exist.",
            details={"review_id": review_id},
        )


class WinNotFoundError(DishDisplayException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "WIN_NOT_FOUND"

    def __init__(self, period_id: int):
        super().__init__(
            message=f"You did not win period {period_id}.",
            details={"period_id": period_id},
        )


class ReviewOwnershipError(DishDisplayException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "REVIEW_NOT_OWNED"

    def __init__(self, review_id: int):
        super().__init__(
            message=f"Review {review_id} belongs to another diner.",
            details={"review_id": review_id},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def dishdisplay_exception_handler(
    request: Request, exc: DishDisplayException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
