"""
Utilities module: Exceptions.
"""

from scaffold_shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ValidationFailedError,
    DependencyBlockedError,
    InternalError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ValidationFailedError",
    "DependencyBlockedError",
    "InternalError",
]
