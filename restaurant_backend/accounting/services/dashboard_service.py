# accounting/services/dashboard_service.py

"""
DASHBOARD WATERFALL

Month-to-date view of where collected money went:

    Total Revenue (sales + VAT collected)
      - VAT
      - Merchant fees
      - COGS
    = Net Profit

Gross sides are used (sales/VAT credits, fees/COGS debits) so the bars match
what was collected and spent in the window.
"""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from decimal import Decimal

from accounting.models.ledger import LedgerEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import get_active_chart, try_resolve_account
from accounting.services.balance_service import ledger_queryset
from accounting.services.money import month_bounds, q2, to_major_number

logger = logging.getLogger(__name__)

EMPTY_METRICS = {
    "monthly_revenue": 0.0,
    "monthly_expenses": 0.0,
    "net_profit": 0.0,
    "total_collected": 0.0,
}


def _side_total(qs, account, entry_type: str) -> Decimal:
    total = qs.filter(account=account).aggregate(
        total=Coalesce(Sum("amount", filter=Q(entry_type=entry_type)), Decimal("0.00"))
    )["total"]
    return q2(total)


def get_dashboard_waterfall(
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    branch_ids: list[int] | None = None,
) -> dict:
    if start_date is None or end_date is None:
        month_start, month_end = month_bounds()
        start_date = start_date or month_start
        end_date = end_date or month_end

    chart = get_active_chart()
    accounts = {
        key: try_resolve_account(key, chart=chart)
        for key in (keys.SALES_REVENUE, keys.VAT_PAYABLE, keys.MERCHANT_FEES, keys.COGS)
    }
    missing = [key for key, account in accounts.items() if account is None]
    period = {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}

    if missing:
        logger.warning("Dashboard accounts missing: %s", ", ".join(missing))
        return {
            "error": "Accounts missing",
            "missing": missing,
            "period": period,
            "waterfall": [],
            "metrics": dict(EMPTY_METRICS),
        }

    qs = ledger_queryset(chart=chart, start=start_date, end=end_date, branch_ids=branch_ids)

    sales = _side_total(qs, accounts[keys.SALES_REVENUE], LedgerEntry.CREDIT)
    vat = _side_total(qs, accounts[keys.VAT_PAYABLE], LedgerEntry.CREDIT)
    fees = _side_total(qs, accounts[keys.MERCHANT_FEES], LedgerEntry.DEBIT)
    cogs = _side_total(qs, accounts[keys.COGS], LedgerEntry.DEBIT)

    total_collected = q2(sales + vat)
    net_profit = q2(total_collected - vat - fees - cogs)
    vat_pct = q2(Decimal(str(settings.VAT_RATE)) * 100).normalize()

    waterfall = [
        {"name": "Total Revenue", "value": to_major_number(total_collected), "type": "total"},
        {"name": f"VAT ({vat_pct:f}%)", "value": to_major_number(-vat), "type": "deduction"},
        {"name": "Merchant Fees", "value": to_major_number(-fees), "type": "deduction"},
        {"name": "COGS", "value": to_major_number(-cogs), "type": "deduction"},
        {"name": "Net Profit", "value": to_major_number(net_profit), "type": "net"},
    ]

    return {
        "period": period,
        "waterfall": waterfall,
        "metrics": {
            "monthly_revenue": to_major_number(sales),
            "monthly_expenses": to_major_number(fees + cogs),
            "net_profit": to_major_number(net_profit),
            "total_collected": to_major_number(total_collected),
        },
    }
