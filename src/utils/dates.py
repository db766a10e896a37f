import calendar

from datetime import datetime, timezone, time, timedelta
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_storage(value: datetime) -> datetime:
    """BSON keeps naive UTC; aware values are converted, naive ones are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_midnight(moment: datetime, days_back: int = 0) -> datetime:
    """Start of the server-local calendar day containing `moment`, shifted `days_back` days."""
    day = moment.astimezone().date() - timedelta(days=days_back)
    # naive local wall time -> aware, so DST offsets resolve per day
    return datetime.combine(day, time.min).astimezone()


def local_date_string(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d")


def months_ago(moment: datetime, months: int = 1) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
