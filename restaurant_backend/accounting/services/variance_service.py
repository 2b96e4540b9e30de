# accounting/services/variance_service.py

"""
======================================================
PATH: accounting/services/variance_service.py
======================================================
THEORETICAL vs ACTUAL VARIANCE

Theoretical figures come from imported POS sales reports (what the menu and
recipes say revenue and COGS should have been). Actual figures come from the
ledger. A line is flagged when it drifts beyond BOTH tolerances:

    OK     |variance| <= tolerance_abs  or  |variance %| <= tolerance_pct
    OVER   actual above theoretical beyond tolerance (always, beyond
           tolerance_abs, when there is no theoretical figure)
    UNDER  actual below theoretical beyond tolerance
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.apps import apps
from django.conf import settings
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import get_active_chart, try_resolve_account
from accounting.services.balance_service import ledger_queryset
from accounting.services.money import ZERO, q2, to_major_number

STATUS_OK = "OK"
STATUS_OVER = "OVER"
STATUS_UNDER = "UNDER"

THEORETICAL_REPORT_STATUSES = ("SUCCESS", "THEORETICAL_ONLY")


@dataclass(frozen=True)
class VarianceLine:
    metric: str
    theoretical: Decimal
    actual: Decimal
    tolerance_pct: Decimal
    tolerance_abs: Decimal

    @property
    def variance(self) -> Decimal:
        return q2(self.actual - self.theoretical)

    @property
    def variance_pct(self) -> Decimal:
        if self.theoretical == ZERO:
            return ZERO
        return q2(self.variance / self.theoretical * 100)

    @property
    def status(self) -> str:
        if abs(self.variance) <= self.tolerance_abs:
            return STATUS_OK
        # No theoretical base: the percentage tolerance cannot excuse a gap.
        if self.theoretical != ZERO and abs(self.variance_pct) <= self.tolerance_pct:
            return STATUS_OK
        return STATUS_OVER if self.variance > 0 else STATUS_UNDER

    def as_dict(self) -> dict:
        return {
            "metric": self.metric,
            "theoretical": to_major_number(self.theoretical),
            "actual": to_major_number(self.actual),
            "variance": to_major_number(self.variance),
            "variance_pct": float(self.variance_pct),
            "status": self.status,
        }


def _theoretical_totals(start: date, end: date, branch_ids) -> tuple[Decimal, Decimal]:
    SalesReport = apps.get_model("recipes", "SalesReport")
    qs = SalesReport.objects.filter(
        status__in=THEORETICAL_REPORT_STATUSES,
        report_date__gte=start,
        report_date__lte=end,
    )
    if branch_ids is not None:
        qs = qs.filter(branch_id__in=branch_ids)

    sums = qs.aggregate(
        revenue=Coalesce(Sum("net_revenue"), Decimal("0.00")),
        cogs=Coalesce(Sum("total_cogs"), Decimal("0.00")),
    )
    return q2(sums["revenue"]), q2(sums["cogs"])


def _net(qs, *, credit_normal: bool) -> Decimal:
    sums = qs.aggregate(
        debits=Coalesce(Sum("amount", filter=Q(entry_type=LedgerEntry.DEBIT)), Decimal("0.00")),
        credits=Coalesce(Sum("amount", filter=Q(entry_type=LedgerEntry.CREDIT)), Decimal("0.00")),
    )
    if credit_normal:
        return q2(sums["credits"] - sums["debits"])
    return q2(sums["debits"] - sums["credits"])


def _cogs_account_filter(chart) -> Q:
    by_name = Q(account__account_type=Account.EXPENSE) & (
        Q(account__name__icontains="COGS") | Q(account__name__icontains="Cost of Goods")
    )
    mapped = try_resolve_account(keys.COGS, chart=chart)
    if mapped is not None:
        return by_name | Q(account_id=mapped.id)
    return by_name


def compute_variance(
    *,
    start_date: date,
    end_date: date,
    branch_ids: list[int] | None = None,
    tolerance_pct=None,
    tolerance_abs=None,
) -> dict:
    tol_pct = q2(settings.VARIANCE_TOLERANCE_PCT if tolerance_pct is None else tolerance_pct)
    tol_abs = q2(settings.VARIANCE_TOLERANCE_ABS if tolerance_abs is None else tolerance_abs)
    if tol_pct < 0 or tol_abs < 0:
        raise ValueError("Tolerances must be non-negative")

    chart = get_active_chart()
    theoretical_revenue, theoretical_cogs = _theoretical_totals(start_date, end_date, branch_ids)

    ledger = ledger_queryset(chart=chart, start=start_date, end=end_date, branch_ids=branch_ids)
    actual_revenue = _net(ledger.filter(account__account_type=Account.REVENUE), credit_normal=True)
    actual_cogs = _net(ledger.filter(_cogs_account_filter(chart)), credit_normal=False)

    lines = [
        VarianceLine("revenue", theoretical_revenue, actual_revenue, tol_pct, tol_abs),
        VarianceLine("cogs", theoretical_cogs, actual_cogs, tol_pct, tol_abs),
    ]

    return {
        "period": {"from": start_date.isoformat(), "to": end_date.isoformat()},
        "branch_ids": branch_ids,
        "tolerance": {"pct": float(tol_pct), "abs": to_major_number(tol_abs)},
        "lines": [line.as_dict() for line in lines],
        "has_exceptions": any(line.status != STATUS_OK for line in lines),
    }
