# app/utils/time.py
"""Date helpers. "Today" is always the calendar day in ALERTS_TIMEZONE."""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.config import settings


def today() -> date:
    return datetime.now(ZoneInfo(settings.ALERTS_TIMEZONE)).date()


def ymd(value) -> Optional[str]:
    """ISO date (YYYY-MM-DD) for a date/datetime, None when missing."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def short_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "—"
    return value.strftime("%d-%m-%Y %H:%M")
