# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Pure accounting read service.

Responsibilities:
- Compute balances per account as at a given date (inclusive end of day)
- Classify balances into Assets, Liabilities, Equity
- Enforce Assets = Liabilities + Equity for the whole business

Important:
- Revenue/Expense activity not yet closed is shown as
  "Current Period Earnings" (code 3999) in Equity.
- A branch slice may legitimately not balance (transfers move inventory
  between branches inside one entry), so for a branch filter the result
  carries balanced=False instead of raising.

Contract:
- Numeric JSON values: major-unit floats (2dp) and minor-unit ints
"""

from __future__ import annotations

from datetime import date

from django.utils import timezone

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import get_active_chart
from accounting.services.balance_service import account_totals
from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int

CURRENT_EARNINGS_CODE = "3999"
CURRENT_EARNINGS_NAME = "Current Period Earnings"


def _line(code: str, name: str, balance) -> dict:
    return {
        "code": code,
        "name": name,
        "balance": to_major_number(balance),
        "balance_minor": to_minor_int(balance),
    }


def generate_balance_sheet(
    *,
    chart: ChartOfAccounts | None = None,
    as_of: date | None = None,
    branch_ids: list[int] | None = None,
) -> dict:
    active_chart = chart or get_active_chart()
    as_of = as_of or timezone.localdate()

    sections = {"assets": [], "liabilities": [], "equity": []}
    totals = {"assets": ZERO, "liabilities": ZERO, "equity": ZERO}
    section_for_type = {
        Account.ASSET: "assets",
        Account.LIABILITY: "liabilities",
        Account.EQUITY: "equity",
    }

    revenue_total = ZERO
    expense_total = ZERO

    for row in account_totals(active_chart, end=as_of, branch_ids=branch_ids):
        bal = row.balance
        if bal == ZERO:
            continue

        acc_type = row.account.account_type
        if acc_type == Account.REVENUE:
            revenue_total += bal
            continue
        if acc_type == Account.EXPENSE:
            expense_total += bal
            continue

        key = section_for_type[acc_type]
        sections[key].append(_line(row.account.code, row.account.name, bal))
        totals[key] += bal

    current_earnings = q2(revenue_total - expense_total)
    if current_earnings != ZERO:
        sections["equity"].append(_line(CURRENT_EARNINGS_CODE, CURRENT_EARNINGS_NAME, current_earnings))
        totals["equity"] += current_earnings

    for key in sections:
        sections[key].sort(key=lambda item: item["code"])

    assets = q2(totals["assets"])
    liabilities_plus_equity = q2(totals["liabilities"] + totals["equity"])
    balanced = assets == liabilities_plus_equity

    if not balanced and branch_ids is None:
        raise AccountingServiceError(
            "Balance Sheet is unbalanced "
            f"(Assets={assets} Liabilities+Equity={liabilities_plus_equity})"
        )

    return {
        "as_of": as_of.isoformat(),
        "branch_ids": branch_ids,
        **sections,
        "totals": {
            "assets": to_major_number(totals["assets"]),
            "liabilities": to_major_number(totals["liabilities"]),
            "equity": to_major_number(totals["equity"]),
            "liabilities_plus_equity": to_major_number(liabilities_plus_equity),
            "assets_minor": to_minor_int(totals["assets"]),
            "liabilities_minor": to_minor_int(totals["liabilities"]),
            "equity_minor": to_minor_int(totals["equity"]),
            "liabilities_plus_equity_minor": to_minor_int(liabilities_plus_equity),
            "balanced": balanced,
        },
    }
