"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,

    # Config
    ConfigParseError,

    # Table I/O
    TableReadError,
    MissingSheetError,
    MissingColumnError,

    # Run control
    RunLockedError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",

    # Config
    "ConfigParseError",

    # Table I/O
    "TableReadError",
    "MissingSheetError",
    "MissingColumnError",

    # Run control
    "RunLockedError",
]
