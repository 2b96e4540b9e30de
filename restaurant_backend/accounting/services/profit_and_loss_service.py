# accounting/services/profit_and_loss_service.py

"""
PROFIT & LOSS SERVICE (INCOME STATEMENT)

Read-only aggregation over immutable ledger entries.

- Revenue = credits - debits on REVENUE accounts
- Expenses = debits - credits on EXPENSE accounts
- Margin % = net_profit / revenue * 100 (2dp), 0 when revenue <= 0
- Either bound of the window may be omitted (all time / up to now)
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from accounting.models.account import Account
from accounting.services.account_resolver import get_active_chart
from accounting.services.balance_service import account_totals
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int


def _margin_pct(revenue: Decimal, net_profit: Decimal) -> float:
    if revenue <= 0:
        return 0.0
    return float(q2(net_profit / revenue * 100))


def get_profit_and_loss(
    *,
    chart=None,
    start_date: date | None = None,
    end_date: date | None = None,
    branch_ids: list[int] | None = None,
) -> dict:
    active_chart = chart or get_active_chart()

    rows = account_totals(
        active_chart,
        start=start_date,
        end=end_date,
        branch_ids=branch_ids,
        account_types=(Account.REVENUE, Account.EXPENSE),
    )

    revenue = ZERO
    expenses = ZERO
    revenue_accounts = []
    expense_accounts = []

    for row in rows:
        if row.debit == ZERO and row.credit == ZERO:
            continue

        item = {
            "account_id": row.account.id,
            "code": row.account.code,
            "name": row.account.name,
            "total": to_major_number(row.balance),
            "total_minor": to_minor_int(row.balance),
        }
        if row.account.account_type == Account.REVENUE:
            revenue += row.balance
            revenue_accounts.append(item)
        else:
            expenses += row.balance
            expense_accounts.append(item)

    revenue = q2(revenue)
    expenses = q2(expenses)
    net_profit = q2(revenue - expenses)

    return {
        "period": {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
        "income": to_major_number(revenue),
        "expenses": to_major_number(expenses),
        "net_profit": to_major_number(net_profit),
        "income_minor": to_minor_int(revenue),
        "expenses_minor": to_minor_int(expenses),
        "net_profit_minor": to_minor_int(net_profit),
        "margin_pct": _margin_pct(revenue, net_profit),
        "revenue_accounts": revenue_accounts,
        "expense_accounts": expense_accounts,
    }
