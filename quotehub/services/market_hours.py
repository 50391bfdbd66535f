from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

US_EASTERN = ZoneInfo("America/New_York")
MARKET_CLOSE_TIME = time(16, 0)


def iso_instant(moment: datetime | None = None) -> str:
    """Format ``moment`` (default: now) as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    current = moment or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    utc = current.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def trading_day_close(trading_day: str | None) -> datetime | None:
    """Return the US market close instant for a ``YYYY-MM-DD`` trading day."""
    if not trading_day:
        return None
    try:
        day = date.fromisoformat(str(trading_day).strip())
    except ValueError:
        return None
    return datetime.combine(day, MARKET_CLOSE_TIME, tzinfo=US_EASTERN)
