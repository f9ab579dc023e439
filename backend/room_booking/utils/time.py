from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_in(zone: ZoneInfo, *, now: datetime | None = None) -> date:
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return current.astimezone(zone).date()


def utc_naive_to_local(dt: datetime, zone: ZoneInfo) -> datetime:
    return dt.replace(tzinfo=timezone.utc).astimezone(zone)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")
