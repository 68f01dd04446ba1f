"""Schemas for Invoices module."""

from pydantic import Field, model_validator

from src.shared.schemas.base import BaseSchema
from src.shared.utils.months import is_valid_month


class InvoiceRequest(BaseSchema):
    """
    Request sent to the invoice generator.

    primary_student_id is only a nominal reference for combined invoices;
    the generator bills every id in selected_student_ids. to_wire() leaves
    selectedStudentIds out of single-student requests.
    """

    primary_student_id: int
    month: str
    session_record_ids: list[int] = Field(default_factory=list)
    multiple_students: bool = False
    # Only present for combined invoices
    selected_student_ids: list[int] | None = None

    @model_validator(mode="after")
    def check_shape(self) -> "InvoiceRequest":
        if not is_valid_month(self.month):
            raise ValueError(f"month must be YYYY-MM, got '{self.month}'")
        if self.multiple_students and not self.selected_student_ids:
            raise ValueError("selected_student_ids is required when multiple_students is true")
        if not self.multiple_students and self.selected_student_ids is not None:
            raise ValueError("selected_student_ids is only allowed when multiple_students is true")
        return self


class InvoiceArtifact(BaseSchema):
    """Generated invoice document plus the name it should be saved under."""

    filename: str
    # Raw PDF bytes; left out of model_dump and to_wire
    content: bytes = Field(exclude=True)
    request: InvoiceRequest

    @property
    def size(self) -> int:
        return len(self.content)
