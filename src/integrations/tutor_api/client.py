"""HTTP client for the upstream tutoring API (session records and invoice PDFs)."""

from __future__ import annotations

import logging

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.core.config import settings
from src.core.exceptions import NetworkError
from src.modules.invoices.schemas import InvoiceRequest
from src.modules.sessions.schemas import SessionRecord

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[SessionRecord])


class TutorApiClient:
    """
    Implements RecordSource and InvoiceService over the REST API.

    Endpoints:
    - GET    /sessions/month/{month}
    - PUT    /sessions/{id}/toggle-payment
    - DELETE /sessions/{id}
    - POST   /invoices/download-pdf

    Every failure (connection error, timeout, non-2xx, unparseable body)
    is raised as NetworkError. Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> TutorApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, operation: str, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("%s failed: %s %s -> %s", operation, method, url, status)
            raise NetworkError(
                f"{operation} failed with status {status}",
                operation=operation,
                upstream_status=status,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s %s -> %s", operation, method, url, exc)
            raise NetworkError(f"{operation} failed: {exc}", operation=operation) from exc
        return response

    # --- RecordSource ---

    async def get_by_month(self, month: str) -> list[SessionRecord]:
        response = await self._request("get_by_month", "GET", f"/sessions/month/{month}")
        try:
            return _records_adapter.validate_python(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise NetworkError(
                f"get_by_month returned an unreadable body: {exc}", operation="get_by_month"
            ) from exc

    async def toggle_payment(self, session_id: int) -> SessionRecord:
        response = await self._request(
            "toggle_payment", "PUT", f"/sessions/{session_id}/toggle-payment"
        )
        try:
            return SessionRecord.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise NetworkError(
                f"toggle_payment returned an unreadable body: {exc}", operation="toggle_payment"
            ) from exc

    async def delete(self, session_id: int) -> None:
        await self._request("delete", "DELETE", f"/sessions/{session_id}")

    # --- InvoiceService ---

    async def generate(self, request: InvoiceRequest) -> bytes:
        response = await self._request(
            "generate_invoice", "POST", "/invoices/download-pdf", json=request.to_wire()
        )
        return response.content
