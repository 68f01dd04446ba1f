from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    NetworkError,
    PartialToggleError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "NetworkError",
    "PartialToggleError",
]
