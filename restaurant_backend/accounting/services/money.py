# accounting/services/money.py

"""
MONEY + DATE HELPERS

Shared by every accounting service so that rounding and the API's
major/minor unit conventions stay identical across reports.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid money value: {value!r}") from exc


def q2(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_major_number(value) -> float:
    return float(q2(value))


def to_minor_int(value) -> int:
    return int((q2(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def start_of_day(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def end_of_day_exclusive(d: date) -> datetime:
    return start_of_day(d + timedelta(days=1))


def month_bounds(today: date | None = None) -> tuple[date, date]:
    today = today or timezone.localdate()
    start = today.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month - timedelta(days=1)


def as_aware(dt: datetime | None) -> datetime:
    if dt is None:
        return timezone.now()
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def as_posted_at(value: date | datetime | None) -> datetime:
    """Dates post at local midnight; datetimes are made aware."""
    if isinstance(value, datetime):
        return as_aware(value)
    if isinstance(value, date):
        return start_of_day(value)
    return timezone.now()
