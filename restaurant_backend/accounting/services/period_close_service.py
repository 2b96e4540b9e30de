# accounting/services/period_close_service.py

"""
PERIOD CLOSE SERVICE

Closes an accounting period by zeroing Revenue and Expense accounts into
Retained Earnings with ONE journal entry, then locks the range.

Guarantees:
- Atomic: journal entry + PeriodClose record created together
- Idempotent: reference "PERIOD_CLOSE:<chart_id>:<start>:<end>"
- No overlapping closes, no future periods
- Posts at 23:59:59 of end_date (inside the range being locked)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.period_close import PeriodClose
from accounting.services.account_resolver import get_active_chart, get_retained_earnings_account
from accounting.services.balance_service import account_totals
from accounting.services.exceptions import PeriodCloseError
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.money import ZERO, q2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodCloseResult:
    period_close: PeriodClose
    journal_entry: JournalEntry
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal


def _validate_period_dates(*, start_date: date, end_date: date) -> None:
    if not start_date or not end_date:
        raise PeriodCloseError("start_date and end_date are required")
    if start_date > end_date:
        raise PeriodCloseError("start_date cannot be after end_date")

    today = timezone.localdate()
    if end_date > today:
        raise PeriodCloseError(f"Cannot close a future period. end_date={end_date} today={today}")


def _closing_instant(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time(23, 59, 59)), timezone.get_current_timezone())


@transaction.atomic
def close_period(*, start_date: date, end_date: date, user=None) -> PeriodCloseResult:
    _validate_period_dates(start_date=start_date, end_date=end_date)

    chart = get_active_chart()

    if PeriodClose.objects.filter(
        chart=chart, start_date__lte=end_date, end_date__gte=start_date
    ).exists():
        raise PeriodCloseError("This period overlaps an already-closed period for the active chart.")

    retained_earnings = get_retained_earnings_account()

    postings = []
    total_revenue = ZERO
    total_expenses = ZERO

    rows = account_totals(
        chart,
        start=start_date,
        end=end_date,
        account_types=(Account.REVENUE, Account.EXPENSE),
    )
    for row in rows:
        net = row.balance
        if net == ZERO:
            continue

        # Zeroing a balance posts it on the opposite side of its normal side.
        if row.account.account_type == Account.REVENUE:
            total_revenue += net
            side = "debit" if net > 0 else "credit"
        else:
            total_expenses += net
            side = "credit" if net > 0 else "debit"

        postings.append({"account": row.account, side: abs(net)})

    if not postings:
        raise PeriodCloseError("Nothing to close: period revenue and expenses are zero")

    total_revenue = q2(total_revenue)
    total_expenses = q2(total_expenses)
    net_profit = q2(total_revenue - total_expenses)

    if net_profit > ZERO:
        postings.append({"account": retained_earnings, "credit": net_profit})
    elif net_profit < ZERO:
        postings.append({"account": retained_earnings, "debit": abs(net_profit)})

    journal_entry = create_journal_entry(
        description=f"Period Close {start_date.isoformat()} to {end_date.isoformat()}",
        postings=postings,
        reference_type="PERIOD_CLOSE",
        reference_id=f"{chart.id}:{start_date.isoformat()}:{end_date.isoformat()}",
        posted_at=_closing_instant(end_date),
        source_type=JournalEntry.SourceType.PERIOD_CLOSE,
        user=user,
    )

    try:
        period_close = PeriodClose.objects.create(
            chart=chart,
            start_date=start_date,
            end_date=end_date,
            journal_entry=journal_entry,
            closed_by=user if getattr(user, "is_authenticated", False) else None,
        )
    except IntegrityError as exc:
        raise PeriodCloseError(
            "Failed to create PeriodClose record (possible overlap/duplicate under concurrency)."
        ) from exc

    logger.info(
        "Closed period %s..%s chart=%s net_profit=%s", start_date, end_date, chart.id, net_profit
    )

    return PeriodCloseResult(
        period_close=period_close,
        journal_entry=journal_entry,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=net_profit,
    )
