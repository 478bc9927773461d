"""
Custom exception hierarchy for Daylog.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The pure engines never raise these; they degrade to null/zero results.
Only the row store and the HTTP boundary do.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DaylogException(Exception):
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


class NotAuthenticatedError(DaylogException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"

    def __init__(self):
        super().__init__(message="Not authenticated.")


class MetricNotFoundError(DaylogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "METRIC_NOT_FOUND"

    def __init__(self, metric_id: str):
        super().__init__(
            message=f"Metric {metric_id!r} not found.",
            details={"metric_id": metric_id},
        )


class MetricAlreadyExistsError(DaylogException):
    http_status = status.HTTP_409_CONFLICT
    code = "METRIC_ALREADY_EXISTS"

    def __init__(self, metric_id: str):
        super().__init__(
            message=f"metric_id {metric_id!r} already exists for this user.",
            details={"metric_id": metric_id},
        )


class InvalidPeriodError(DaylogException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_PERIOD"

    def __init__(self, period: int, max_period: int):
        super().__init__(
            message=f"Period must be between 1 and {max_period}. Received {period}.",
            details={"period": period, "max_period": max_period},
        )


class RowStoreError(DaylogException):
    """A query or write against config/log failed."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "ROW_STORE_ERROR"

    def __init__(self, operation: str):
        super().__init__(
            message=f"{operation} failed.",
            details={"operation": operation},
        )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _envelope(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    body: dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def daylog_exception_handler(request: Request, exc: DaylogException) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 listing each offending field (the `body` prefix is dropped from paths)."""
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed.",
        {"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error.")


def register_exception_handlers(app: FastAPI) -> None:
    """Most specific first; the bare Exception handler is the last resort."""
    app.add_exception_handler(DaylogException, daylog_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
