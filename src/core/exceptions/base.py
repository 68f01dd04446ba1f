from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class NetworkError(AppException):
    """A call to the upstream API failed (transport error or non-2xx status)."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        upstream_status: int | None = None,
    ):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(message=message, status_code=502, details=details)


class PartialToggleError(AppException):
    """Some records of a group toggle were updated and some were not."""

    def __init__(self, student_id: int, succeeded: list[int], failed: dict[int, str]):
        message = (
            f"Payment toggle for student {student_id} failed for "
            f"{len(failed)} of {len(succeeded) + len(failed)} sessions"
        )
        super().__init__(
            message=message,
            status_code=409,
            details={
                "student_id": student_id,
                "succeeded": list(succeeded),
                "failed": dict(failed),
            },
        )
