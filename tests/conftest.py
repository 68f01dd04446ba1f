import asyncio
from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from src.core.exceptions import NetworkError
from src.modules.invoices.schemas import InvoiceRequest
from src.modules.sessions.schemas import SessionRecord

FAKE_PDF = b"%PDF-1.4 fake invoice"


def make_record(
    id: int,
    student_id: int,
    session_date: date | str = date(2024, 3, 5),
    *,
    student_name: str | None = None,
    price_per_hour: int | Decimal = 200000,
    session_count: int = 1,
    hours: int = 2,
    total_amount: int | Decimal | None = None,
    paid: bool = False,
) -> SessionRecord:
    """Build a SessionRecord the way the upstream API would return it."""
    if isinstance(session_date, str):
        session_date = date.fromisoformat(session_date)
    if total_amount is None:
        total_amount = Decimal(price_per_hour) * hours
    return SessionRecord(
        id=id,
        student_id=student_id,
        student_name=student_name or f"Student {student_id}",
        price_per_hour=price_per_hour,
        session_date=session_date,
        session_count=session_count,
        hours=hours,
        total_amount=total_amount,
        paid=paid,
        month=f"{session_date.year:04d}-{session_date.month:02d}",
    )


class FakeRecordSource:
    """In-memory RecordSource with failure injection and per-month gates."""

    def __init__(self, records: list[SessionRecord] | None = None):
        self.records: dict[int, SessionRecord] = {r.id: r for r in records or []}
        self.fail_toggle_ids: set[int] = set()
        self.fail_fetch = False
        self.fail_delete = False
        # month -> event; get_by_month waits for it before answering
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, object]] = []

    def add(self, *records: SessionRecord) -> None:
        for r in records:
            self.records[r.id] = r

    async def get_by_month(self, month: str) -> list[SessionRecord]:
        self.calls.append(("get_by_month", month))
        gate = self.gates.get(month)
        if gate is not None:
            await gate.wait()
        if self.fail_fetch:
            raise NetworkError("fetch failed", operation="get_by_month", upstream_status=500)
        return [r for r in self.records.values() if r.month == month]

    async def toggle_payment(self, session_id: int) -> SessionRecord:
        self.calls.append(("toggle_payment", session_id))
        if session_id in self.fail_toggle_ids:
            raise NetworkError(f"toggle {session_id} failed", operation="toggle_payment")
        record = self.records.get(session_id)
        if record is None:
            raise NetworkError("not found", operation="toggle_payment", upstream_status=404)
        updated = record.model_copy(update={"paid": not record.paid})
        self.records[session_id] = updated
        return updated

    async def delete(self, session_id: int) -> None:
        self.calls.append(("delete", session_id))
        if self.fail_delete or session_id not in self.records:
            raise NetworkError("delete failed", operation="delete", upstream_status=404)
        del self.records[session_id]


class FakeInvoiceService:
    """Records every request and returns fixed PDF bytes."""

    def __init__(self):
        self.requests: list[InvoiceRequest] = []
        self.content = FAKE_PDF
        self.fail = False
        self.gate: asyncio.Event | None = None

    async def generate(self, request: InvoiceRequest) -> bytes:
        self.requests.append(request)
        gate = self.gate
        if gate is not None:
            await gate.wait()
        if self.fail:
            raise NetworkError("generator down", operation="generate_invoice", upstream_status=503)
        return self.content


@pytest.fixture
def record_factory() -> Callable[..., SessionRecord]:
    return make_record


@pytest.fixture
def march_records() -> list[SessionRecord]:
    """
    2024-03: student 10 has two unpaid 2h sessions at 200000/h,
    student 11 one paid 3h session at 150000/h.
    """
    return [
        make_record(1, 10, "2024-03-12", student_name="An", price_per_hour=200000, hours=2),
        make_record(3, 11, "2024-03-07", student_name="Binh", price_per_hour=150000, hours=3, paid=True),
        make_record(2, 10, "2024-03-05", student_name="An", price_per_hour=200000, hours=2),
    ]


@pytest.fixture
def record_source(march_records) -> FakeRecordSource:
    return FakeRecordSource(march_records)


@pytest.fixture
def invoice_service() -> FakeInvoiceService:
    return FakeInvoiceService()
