"""
Calendar helpers shared by the ledger and gamification engines.

All comparisons are done on local calendar dates (midnight-aligned), never
on elapsed hours.
"""
import calendar
import re
from datetime import date, datetime, time, timedelta

MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 string into a naive local datetime.

    Aware values are converted to local time first, so "2024-01-15T23:30:00Z"
    lands on whatever calendar day that instant is locally.
    """
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def local_date(value: str | datetime) -> date:
    if isinstance(value, str):
        value = parse_iso(value)
    return value.date()


def is_same_day(value: str, now: datetime) -> bool:
    return local_date(value) == now.date()


def days_between(earlier: str | datetime, later: datetime) -> int:
    """Calendar-day distance from ``earlier`` to ``later``."""
    return (later.date() - local_date(earlier)).days


def days_until(value: str, now: datetime) -> int:
    """Days from today until ``value`` (negative when it is in the past)."""
    return (local_date(value) - now.date()).days


def next_midnight(now: datetime) -> datetime:
    return datetime.combine(now.date() + timedelta(days=1), time.min)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: datetime, n: int) -> datetime:
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, last_day_of_month(year, month))
    return d.replace(year=year, month=month, day=day)


def month_key(now: datetime) -> str:
    return now.strftime("%Y-%m")


def is_month_key(value: str) -> bool:
    return bool(MONTH_KEY_RE.match(value or ""))
