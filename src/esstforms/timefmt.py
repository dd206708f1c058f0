from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

# The plant runs on Toronto time regardless of where the server is hosted.
SITE_TZ = ZoneInfo("America/Toronto")


def now_site() -> datetime:
    return datetime.now(SITE_TZ)


def format_korean_long(moment: datetime) -> str:
    """
    Render like ko-KR `dateStyle: long, timeStyle: short`, e.g. "2025년 12월 3일 오후 2:05".
    """
    local = moment.astimezone(SITE_TZ) if moment.tzinfo else moment
    meridiem = "오전" if local.hour < 12 else "오후"
    hour12 = local.hour % 12 or 12
    return f"{local.year}년 {local.month}월 {local.day}일 {meridiem} {hour12}:{local.minute:02d}"


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort parse of a sheet cell into an aware datetime.

    Apps Script serializes Date cells as ISO-8601 UTC ("2025-01-05T14:03:00.000Z").
    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_site_minutes(moment: datetime) -> str:
    """
    en-CA 24h rendering in site time: "YYYY-MM-DD HH:MM".
    """
    return moment.astimezone(SITE_TZ).strftime("%Y-%m-%d %H:%M")
