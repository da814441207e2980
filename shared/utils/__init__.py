"""
Utilities module: HTTP exceptions.
"""

from shared.utils.exceptions import (
    AppException,
    UnauthorizedError,
    InternalError,
    ExternalServiceError,
)

__all__ = [
    "AppException",
    "UnauthorizedError",
    "InternalError",
    "ExternalServiceError",
]
