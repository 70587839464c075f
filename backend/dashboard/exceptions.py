"""API exception taxonomy and handlers.

Handlers and services raise these; the registered handler turns them into
``{"detail": ..., "code": ...}`` JSON with the matching status code.
"""
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class DashboardError(Exception):
    """Base exception for the dashboard API."""

    status_code = 500
    code = "DASHBOARD_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {"detail": self.message, "code": self.code}
        if self.details:
            result["details"] = self.details
        return result


class UnauthorizedError(DashboardError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class BadRequestError(DashboardError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(DashboardError):
    status_code = 404
    code = "NOT_FOUND"


class InternalError(DashboardError):
    status_code = 500
    code = "INTERNAL_ERROR"


# =============================================================================
# Upload
# =============================================================================

class FileTooLargeError(BadRequestError):
    """Raised when an upload exceeds the size limit."""

    code = "FILE_TOO_LARGE"

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB",
            details={"size": size, "max_size": max_size},
        )


class UnsupportedTypeError(BadRequestError):
    """Raised when an upload's MIME type is not on the allowlist."""

    code = "UNSUPPORTED_TYPE"

    def __init__(self, mime_type: str, allowed: list[str]):
        super().__init__(
            f"File type {mime_type or 'unknown'} not allowed. "
            f"Allowed types: {', '.join(allowed)}",
            details={"type": mime_type, "allowed_types": allowed},
        )


class StorageFailedError(InternalError):
    code = "STORAGE_FAILED"

    def __init__(self, message: str = "File storage failed. Please try again or contact support."):
        super().__init__(message)


class DatabaseFailedError(InternalError):
    code = "DATABASE_FAILED"

    def __init__(self, message: str = "Failed to save file metadata. Please try again."):
        super().__init__(message)


# =============================================================================
# Exception Handlers
# =============================================================================

async def dashboard_exception_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """Convert DashboardError to JSON response."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)
