"""Billing period helpers. A billing month is a "YYYY-MM" string."""

import re
from datetime import date

from src.core.exceptions import ValidationError

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(month: str) -> tuple[int, int]:
    """Split "YYYY-MM" into (year, month). Raises ValidationError for anything else."""
    m = _MONTH_RE.match(month or "")
    if not m:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM", field="month")
    return int(m.group(1)), int(m.group(2))


def is_valid_month(month: str) -> bool:
    return bool(_MONTH_RE.match(month or ""))


def validate_month(month: str) -> str:
    parse_month(month)
    return month


def shift_month(month: str, delta: int) -> str:
    """
    Move a billing month by ``delta`` months.

    Examples:
        >>> shift_month("2024-01", -1)
        '2023-12'
        >>> shift_month("2024-11", 3)
        '2025-02'
    """
    year, mon = parse_month(month)
    index = year * 12 + (mon - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def month_label(month: str) -> str:
    """Display label used on invoices and the monthly view, e.g. 'Tháng 03/2024'."""
    year, mon = parse_month(month)
    return f"Tháng {mon:02d}/{year:04d}"
