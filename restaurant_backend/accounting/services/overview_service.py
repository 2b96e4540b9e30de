# accounting/services/overview_service.py

"""
ACCOUNTING OVERVIEW KPI SERVICE

Ledger-driven KPIs for the accounting landing page.

- Balance sheet KPIs are "as of" a date; unclosed earnings are folded into equity
- P&L KPIs cover [start_date, end_date]
"""

from datetime import date

from django.utils import timezone

from accounting.models.account import Account
from accounting.services.account_resolver import get_active_chart
from accounting.services.balance_service import get_totals_by_account_type
from accounting.services.money import q2, to_major_number, to_minor_int


def get_accounting_overview_kpis(
    *,
    as_of: date | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    branch_ids: list[int] | None = None,
) -> dict:
    chart = get_active_chart()
    as_of = as_of or timezone.localdate()

    snapshot = get_totals_by_account_type(chart, end=as_of, branch_ids=branch_ids)
    equity = q2(snapshot[Account.EQUITY] + snapshot[Account.REVENUE] - snapshot[Account.EXPENSE])

    period = get_totals_by_account_type(chart, start=start_date, end=end_date, branch_ids=branch_ids)
    revenue = period[Account.REVENUE]
    expenses = period[Account.EXPENSE]
    net_profit = q2(revenue - expenses)

    values = {
        "assets": snapshot[Account.ASSET],
        "liabilities": snapshot[Account.LIABILITY],
        "equity": equity,
        "revenue": revenue,
        "expenses": expenses,
        "net_profit": net_profit,
    }

    out = {
        "as_of_date": as_of.isoformat(),
        "period": {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
    }
    for key, value in values.items():
        out[key] = to_major_number(value)
        out[f"{key}_minor"] = to_minor_int(value)
    return out
