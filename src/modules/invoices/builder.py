"""Builds invoice requests from the current month's student groups."""

from collections.abc import Mapping, Sequence

from src.core.config import settings
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.invoices.schemas import InvoiceRequest
from src.modules.sessions.schemas import StudentGroup
from src.shared.utils.months import validate_month


def invoice_filename(month: str, participant_count: int, prefix: str | None = None) -> str:
    """
    File name for a downloaded invoice.

    Examples:
        >>> invoice_filename("2024-03", 1)
        'Bao-Gia-2024-03.pdf'
        >>> invoice_filename("2024-03", 3)
        'Bao-Gia-2024-03-3-hoc-sinh.pdf'
    """
    prefix = prefix or settings.invoice_filename_prefix
    if participant_count == 1:
        return f"{prefix}-{month}.pdf"
    return f"{prefix}-{month}-{participant_count}-hoc-sinh.pdf"


class InvoiceRequestBuilder:
    """Turns groups (and a selection) into InvoiceRequests for one billing month."""

    def __init__(self, month: str):
        self.month = validate_month(month)

    def build_single(
        self,
        student_id: int,
        groups: Mapping[int, StudentGroup],
    ) -> InvoiceRequest:
        """Invoice for one student covering every session in their group, in display order."""
        group = groups.get(student_id)
        if group is None:
            raise NotFoundError("Student group", student_id)
        session_ids = group.session_ids
        if not session_ids:
            raise ValidationError(
                f"Student {student_id} has no sessions in {self.month}",
                field="session_record_ids",
            )
        return InvoiceRequest(
            primary_student_id=student_id,
            month=self.month,
            session_record_ids=session_ids,
            multiple_students=False,
        )

    def build_combined(
        self,
        selected_student_ids: Sequence[int],
        groups: Mapping[int, StudentGroup],
    ) -> InvoiceRequest:
        """
        One invoice for several students.

        Session ids are concatenated in the order of selected_student_ids.
        Selected ids without a group add nothing. The first selected id is
        sent as primary_student_id.
        """
        selected = list(selected_student_ids)
        if not selected:
            raise ValidationError(
                "Select at least one student", field="selected_student_ids"
            )

        session_ids: list[int] = []
        for student_id in selected:
            group = groups.get(student_id)
            if group is not None:
                session_ids.extend(group.session_ids)

        if not session_ids:
            raise ValidationError(
                "No sessions to invoice for the selected students",
                field="session_record_ids",
            )

        return InvoiceRequest(
            primary_student_id=selected[0],
            month=self.month,
            session_record_ids=session_ids,
            multiple_students=True,
            selected_student_ids=selected,
        )
