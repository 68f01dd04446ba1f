"""Schemas for the Sessions module: raw session records and derived student groups."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import AliasChoices, Field, field_validator

from src.shared.schemas.base import BaseSchema
from src.shared.utils.money import to_money


class PaymentState(StrEnum):
    """Payment state of a session record or of a whole student group."""

    PAID = "paid"
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"  # groups only: some sessions paid, some not

    @classmethod
    def from_flag(cls, paid: bool) -> "PaymentState":
        return cls.PAID if paid else cls.UNPAID


class SessionRecord(BaseSchema):
    """
    One teaching entry for one student on one date, as returned upstream.

    total_amount is computed upstream (hours x price_per_hour) and is only
    ever summed here, never recomputed.
    """

    id: int
    student_id: int
    student_name: str
    price_per_hour: Decimal
    session_date: date
    # Upstream calls this "sessions"
    session_count: int = Field(
        alias="sessions",
        validation_alias=AliasChoices("sessions", "sessionCount", "session_count"),
    )
    hours: int
    total_amount: Decimal
    paid: bool = False
    month: str | None = None
    notes: str | None = None

    @field_validator("price_per_hour", "total_amount", mode="before")
    @classmethod
    def normalize_money(cls, v):
        if v is None:
            return v
        return to_money(v)

    @property
    def payment_state(self) -> PaymentState:
        return PaymentState.from_flag(self.paid)


class StudentGroup(BaseSchema):
    """All session records of one student in the current month, with totals."""

    student_id: int
    student_name: str
    price_per_hour: Decimal
    sessions: list[SessionRecord] = Field(default_factory=list)
    total_sessions: int = 0
    total_hours: int = 0
    total_amount: Decimal = Decimal("0")
    all_paid: bool = True

    @property
    def session_ids(self) -> list[int]:
        return [s.id for s in self.sessions]

    @property
    def payment_state(self) -> PaymentState:
        if self.all_paid:
            return PaymentState.PAID
        if any(s.paid for s in self.sessions):
            return PaymentState.PARTIALLY_PAID
        return PaymentState.UNPAID


class MonthSummary(BaseSchema):
    """Headline numbers for one billing month."""

    total_sessions: int = 0
    total_paid: Decimal = Decimal("0")
    total_unpaid: Decimal = Decimal("0")
    student_count: int = 0


class SelectionTotals(BaseSchema):
    """Sums over the groups currently selected for a combined invoice."""

    student_count: int = 0
    total_sessions: int = 0
    total_hours: int = 0
    total_amount: Decimal = Decimal("0")
