"""Civil date arithmetic anchored to the property's timezone.

Every date is interpreted as midnight in the property timezone (Asia/Dhaka
by default), never in the timezone of the host running the service.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from src.config import settings

DateLike = Union[str, date]


def property_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    """Timezone every civil date is anchored to."""
    return ZoneInfo(tz_name or settings.property.timezone)


def parse_civil_date(value: DateLike) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through).

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def anchor(value: DateLike, tz_name: Optional[str] = None) -> datetime:
    """Midnight of the given civil date in the property timezone."""
    return datetime.combine(parse_civil_date(value), time.min, tzinfo=property_zone(tz_name))


def now_local(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> datetime:
    """Current instant expressed in the property timezone."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(property_zone(tz_name))


def today(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> str:
    """Today's date in the property timezone, as YYYY-MM-DD."""
    return now_local(now, tz_name).date().isoformat()


def add_days(value: DateLike, days: int, tz_name: Optional[str] = None) -> str:
    """Shift a civil date by a number of calendar days."""
    shifted = anchor(value, tz_name) + timedelta(days=days)
    return shifted.astimezone(property_zone(tz_name)).date().isoformat()


def add_months(value: DateLike, months: int, tz_name: Optional[str] = None) -> str:
    """Shift a civil date by calendar months.

    The day is clamped to the last day of the target month
    (2024-03-31 minus one month is 2024-02-29).
    """
    shifted = anchor(value, tz_name) + relativedelta(months=months)
    return shifted.astimezone(property_zone(tz_name)).date().isoformat()
