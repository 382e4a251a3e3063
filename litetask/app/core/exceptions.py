"""
Custom HTTP exceptions and global exception handlers for LiteTask.
All application-level errors are defined here for consistency.

The data layer raises these directly; every class carries the HTTP status
the handlers render, so the taxonomy survives unchanged up to the response.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ── Custom exception classes ──────────────────────────────────────────────────

class LiteTaskException(Exception):
    """Base exception for all LiteTask domain errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code or "LITETASK_ERROR"
        super().__init__(detail)


class NotFoundException(LiteTaskException):
    def __init__(
        self,
        resource: str,
        resource_id: object | None = None,
        error_code: str = "NOT_FOUND",
    ) -> None:
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
        )


class ProjectNotFoundException(NotFoundException):
    def __init__(self, project_id: object | None = None) -> None:
        super().__init__("Project", project_id, error_code="PROJECT_NOT_FOUND")


class BadRequestException(LiteTaskException):
    def __init__(self, detail: str, error_code: str = "BAD_REQUEST") -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class InvalidStatusException(BadRequestException):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid status '{value}'", error_code="INVALID_STATUS")


class InvalidRoleException(BadRequestException):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid role '{value}'", error_code="INVALID_ROLE")


class InvalidUsernameException(BadRequestException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, error_code="INVALID_USERNAME")


class InvalidPasswordException(BadRequestException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, error_code="INVALID_PASSWORD")


class LastAdminException(BadRequestException):
    def __init__(self) -> None:
        super().__init__("Cannot remove the last admin", error_code="LAST_ADMIN")


class ConflictException(LiteTaskException):
    def __init__(self, detail: str, error_code: str = "CONFLICT") -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
        )


class UsernameAlreadySetException(ConflictException):
    def __init__(self) -> None:
        super().__init__("Username is already set", error_code="USERNAME_ALREADY_SET")


class ForbiddenException(LiteTaskException):
    def __init__(self, detail: str = "You do not have permission to perform this action") -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN",
        )


class UnauthorizedException(LiteTaskException):
    def __init__(
        self,
        detail: str = "Authentication required",
        error_code: str = "UNAUTHORIZED",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
        )


# Session failures share the 401 outcome but keep distinct codes.

class MissingTokenException(UnauthorizedException):
    def __init__(self) -> None:
        super().__init__("Missing authentication cookie", error_code="MISSING_TOKEN")


class MalformedTokenException(UnauthorizedException):
    def __init__(self, detail: str = "Malformed session token") -> None:
        super().__init__(detail, error_code="MALFORMED_TOKEN")


class InvalidSignatureException(UnauthorizedException):
    def __init__(self) -> None:
        super().__init__("Invalid session token signature", error_code="INVALID_SIGNATURE")


class TokenExpiredException(UnauthorizedException):
    def __init__(self) -> None:
        super().__init__("Session token has expired", error_code="TOKEN_EXPIRED")


class InactiveUserException(UnauthorizedException):
    def __init__(self, detail: str = "User not found or blocked") -> None:
        super().__init__(detail, error_code="INACTIVE_USER")


# ── Exception handlers ────────────────────────────────────────────────────────

def _error_response(status_code: int, detail: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_code,
            "detail": detail,
        },
    )


async def litetask_exception_handler(
    request: Request, exc: LiteTaskException
) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, exc.error_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"]})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "VALIDATION_ERROR",
            "detail": "Request validation failed",
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected internal server error occurred",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI application."""
    app.add_exception_handler(LiteTaskException, litetask_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
