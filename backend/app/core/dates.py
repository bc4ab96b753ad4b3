"""Date helpers for folder names, filenames and display strings.

All names use the configured local zone (Asia/Bangkok by default). The
two-digit year in DDMMYY is Gregorian unless the Buddhist era is selected,
in which case 543 years are added before truncation.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

BUDDHIST_ERA_OFFSET = 543


def to_local(value: datetime, tz_name: str) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name))


def ddmmyy(value: datetime, tz_name: str, era: str = "gregorian") -> str:
    """DDMMYY of the local calendar day, e.g. 25 Feb 2026 -> '250226'."""
    local = to_local(value, tz_name)
    year = local.year + BUDDHIST_ERA_OFFSET if era == "buddhist" else local.year
    return f"{local.day:02d}{local.month:02d}{year % 100:02d}"


def hhmm(value: datetime, tz_name: str) -> str:
    local = to_local(value, tz_name)
    return f"{local.hour:02d}{local.minute:02d}"


def display_datetime(value: datetime, tz_name: str) -> str:
    """Human-readable local stamp used in sheets and photo burn-in."""
    return to_local(value, tz_name).strftime("%d/%m/%Y %H:%M:%S")


def parse_client_timestamp(raw: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Parse an ISO-8601 client timestamp, falling back to now (UTC)."""
    fallback = now or datetime.now(timezone.utc)
    if not raw:
        return fallback
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def month_window(year: int, month: Optional[int], tz_name: str) -> tuple[datetime, datetime]:
    """UTC [start, end) bounds of a local month, or of the whole year when month is None."""
    tz = ZoneInfo(tz_name)
    if month is None:
        start = datetime(year, 1, 1, tzinfo=tz)
        end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        start = datetime(year, month, 1, tzinfo=tz)
        if month == 12:
            end = datetime(year + 1, 1, 1, tzinfo=tz)
        else:
            end = datetime(year, month + 1, 1, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
