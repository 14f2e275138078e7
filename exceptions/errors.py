"""
Custom exception classes for the application.

Everything raised here is run-level: it aborts the whole cleanup run.
Per-record problems are recorded as issues, never raised past the
pipeline's per-record boundary.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.
    
    All custom exceptions inherit from this.
    
    Attributes:
        code: Error code (e.g., "CONFIG_PARSE_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """
    
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)
    
    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""
    
    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""
    
    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""
    
    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


# ===================
# CONFIG ERRORS
# ===================

class ConfigParseError(ValidationError):
    """A Config entry is not valid JSON or has the wrong shape."""

    def __init__(self, key: str, reason: str, preview: Optional[str] = None):
        details = {"key": key, "reason": reason}
        if preview is not None:
            details["preview"] = preview[:100]
        super().__init__(
            code="CONFIG_PARSE_ERROR",
            message=f'Failed to parse config key "{key}": {reason}',
            details=details
        )


# ===================
# TABLE I/O ERRORS
# ===================

class TableReadError(ValidationError):
    """Workbook or CSV could not be read."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="TABLE_READ_ERROR",
            message=message,
            details=details
        )


class MissingSheetError(ValidationError):
    """A required sheet is absent from the workbook."""

    def __init__(self, sheet: str):
        super().__init__(
            code="MISSING_SHEET",
            message=f'Missing required sheet: "{sheet}"',
            details={"sheet": sheet}
        )


class MissingColumnError(ValidationError):
    """The input table lacks a required column."""

    def __init__(self, column: str, available: Optional[list[str]] = None):
        super().__init__(
            code="MISSING_COLUMN",
            message=f'Input missing "{column}" column',
            details={"column": column, "available": available or []}
        )


# ===================
# RUN ERRORS
# ===================

class RunLockedError(ConflictError):
    """Another cleanup run holds the dataset lock."""

    def __init__(self, dataset: str, timeout_seconds: float):
        super().__init__(
            code="RUN_IN_PROGRESS",
            message="Another run is in progress",
            details={"dataset": dataset, "timeout_seconds": timeout_seconds}
        )
