from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 datetime (``2026-02-01T18:30`` or with seconds)."""
    return datetime.fromisoformat(value.strip())
