"""Tests for TutorApiClient against a mocked transport."""

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from src.core.exceptions import NetworkError
from src.integrations.tutor_api.base import InvoiceService, RecordSource
from src.integrations.tutor_api.client import TutorApiClient
from src.modules.invoices.schemas import InvoiceRequest

BASE_URL = "http://tutor.test/api"

RECORD_JSON = {
    "id": 1,
    "studentId": 10,
    "studentName": "An",
    "pricePerHour": 200000,
    "sessionDate": "2024-03-05",
    "sessions": 1,
    "hours": 2,
    "totalAmount": 400000,
    "paid": False,
    "month": "2024-03",
    "createdAt": "2024-03-05T10:00:00",
}


def make_client(handler) -> TutorApiClient:
    return TutorApiClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestRecordSource:
    """Tests for the session record endpoints."""

    async def test_get_by_month(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json=[RECORD_JSON])

        async with make_client(handler) as client:
            records = await client.get_by_month("2024-03")

        assert seen == [("GET", "/api/sessions/month/2024-03")]
        assert len(records) == 1
        record = records[0]
        assert record.student_id == 10
        assert record.session_count == 1
        assert record.session_date == date(2024, 3, 5)
        assert record.total_amount == Decimal("400000")

    async def test_toggle_payment(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert request.url.path == "/api/sessions/1/toggle-payment"
            return httpx.Response(200, json={**RECORD_JSON, "paid": True})

        async with make_client(handler) as client:
            record = await client.toggle_payment(1)

        assert record.paid is True

    async def test_delete(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            assert request.url.path == "/api/sessions/7"
            return httpx.Response(204)

        async with make_client(handler) as client:
            assert await client.delete(7) is None

    async def test_http_error_becomes_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "boom"})

        async with make_client(handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_by_month("2024-03")

        assert exc_info.value.details["upstream_status"] == 500
        assert exc_info.value.details["operation"] == "get_by_month"

    async def test_connection_error_becomes_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.toggle_payment(1)

        assert "upstream_status" not in exc_info.value.details

    async def test_unreadable_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": "not-a-number"}])

        async with make_client(handler) as client:
            with pytest.raises(NetworkError):
                await client.get_by_month("2024-03")


class TestInvoiceService:
    """Tests for invoice generation."""

    async def test_generate_posts_wire_shape(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200, content=b"%PDF-1.4", headers={"Content-Type": "application/pdf"}
            )

        request = InvoiceRequest(
            primary_student_id=10,
            month="2024-03",
            session_record_ids=[1, 2, 3],
            multiple_students=True,
            selected_student_ids=[10, 11],
        )
        async with make_client(handler) as client:
            content = await client.generate(request)

        assert content == b"%PDF-1.4"
        assert captured["path"] == "/api/invoices/download-pdf"
        assert captured["body"] == {
            "primaryStudentId": 10,
            "month": "2024-03",
            "sessionRecordIds": [1, 2, 3],
            "multipleStudents": True,
            "selectedStudentIds": [10, 11],
        }

    async def test_generate_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        request = InvoiceRequest(primary_student_id=1, month="2024-03", session_record_ids=[1])
        async with make_client(handler) as client:
            with pytest.raises(NetworkError):
                await client.generate(request)


def test_client_satisfies_protocols():
    client = TutorApiClient(base_url=BASE_URL)
    assert isinstance(client, RecordSource)
    assert isinstance(client, InvoiceService)
