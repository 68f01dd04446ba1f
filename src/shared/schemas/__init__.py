from src.shared.schemas.base import BaseSchema, ErrorDetail

__all__ = [
    "BaseSchema",
    "ErrorDetail",
]
