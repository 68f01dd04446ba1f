"""Wiring for the monthly billing view."""

from src.core.config import settings
from src.core.logging import configure_logging
from src.integrations.tutor_api.client import TutorApiClient
from src.modules.monthly_view.service import MonthlyViewService


def create_monthly_view(
    month: str | None = None,
    client: TutorApiClient | None = None,
) -> MonthlyViewService:
    """
    Create a MonthlyViewService backed by the upstream API.

    The same client serves as RecordSource and InvoiceService. The caller
    owns the client and closes it with ``await view.source.aclose()``.
    """
    configure_logging(settings)
    client = client or TutorApiClient()
    return MonthlyViewService(client, client, month=month)
