"""Interfaces of the upstream services this package talks to."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from src.modules.sessions.schemas import SessionRecord

if TYPE_CHECKING:
    from src.modules.invoices.schemas import InvoiceRequest


@runtime_checkable
class RecordSource(Protocol):
    """Session records store. Every method raises NetworkError on failure."""

    async def get_by_month(self, month: str) -> list[SessionRecord]: ...

    async def toggle_payment(self, session_id: int) -> SessionRecord: ...

    async def delete(self, session_id: int) -> None: ...


@runtime_checkable
class InvoiceService(Protocol):
    """Invoice generator. Returns the rendered document bytes; raises NetworkError."""

    async def generate(self, request: "InvoiceRequest") -> bytes: ...
