"""Schemas for the monthly view state handed to the UI layer."""

from enum import StrEnum

from pydantic import Field

from src.modules.sessions.schemas import MonthSummary, SelectionTotals, StudentGroup
from src.shared.schemas.base import BaseSchema, ErrorDetail


class ViewOperation(StrEnum):
    """Async operations of the monthly view; each has its own busy/error flag."""

    LOAD = "load"
    TOGGLE_PAYMENT = "toggle_payment"
    TOGGLE_GROUP_PAYMENT = "toggle_group_payment"
    DELETE = "delete"
    GENERATE_INVOICE = "generate_invoice"


class MonthlyViewState(BaseSchema):
    """Read-only snapshot of one month's view."""

    month: str
    month_label: str
    groups: list[StudentGroup] = Field(default_factory=list)
    selected_student_ids: list[int] = Field(default_factory=list)
    select_all: bool = False
    selection_totals: SelectionTotals = Field(default_factory=SelectionTotals)
    summary: MonthSummary = Field(default_factory=MonthSummary)
    busy: dict[ViewOperation, bool] = Field(default_factory=dict)
    errors: dict[ViewOperation, ErrorDetail] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.groups
