from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO date or datetime string; empty values mean no bound."""
    v = (value or "").strip()
    if not v:
        return None
    if len(v) == 10:
        return datetime.combine(parse_iso_date(v), datetime.min.time())
    return datetime.fromisoformat(v)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def fmt_datetime(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None
