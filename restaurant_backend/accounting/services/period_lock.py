# accounting/services/period_lock.py

"""
======================================================
PATH: accounting/services/period_lock.py
======================================================
PERIOD LOCK GUARD

Blocks any journal entry whose posted_at date falls inside a closed period
of the chart being posted to. Called by the journal engine only.
"""

from __future__ import annotations

from datetime import date, datetime

from django.utils import timezone

from accounting.models.period_close import PeriodClose


class PeriodLockedError(ValueError):
    """Raised when attempting to post into a closed accounting period."""


def _to_date(value: datetime | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return timezone.localtime(value).date()
    return value


def find_closed_period(*, chart, on: date) -> PeriodClose | None:
    return (
        PeriodClose.objects.filter(chart=chart, start_date__lte=on, end_date__gte=on)
        .order_by("start_date")
        .first()
    )


def assert_period_open(*, chart, posted_at: datetime | date | None) -> None:
    post_date = _to_date(posted_at)
    if post_date is None:
        return

    closed = find_closed_period(chart=chart, on=post_date)
    if closed is not None:
        raise PeriodLockedError(
            f"Posting blocked: {post_date} falls inside the closed period "
            f"{closed.start_date} -> {closed.end_date}."
        )
