# accounting/services/chart_seed.py

"""
RESTAURANT CHART OF ACCOUNTS SEED

Idempotent: accounts are matched by (chart, code); names and types are
corrected in place, never duplicated. The seeded chart becomes the single
active chart.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import DEFAULT_CHART_CODE, DEFAULT_CHART_NAME

RESTAURANT_ACCOUNTS = [
    # ASSETS
    ("1005", "Cash Clearing", Account.ASSET),
    ("1010", "Cash on Hand", Account.ASSET),
    ("1015", "Petty Cash", Account.ASSET),
    ("1020", "Bank Account", Account.ASSET),
    ("1100", "Inventory Asset", Account.ASSET),
    ("1200", "Fixed Assets", Account.ASSET),
    # LIABILITIES
    ("2010", "Accounts Payable", Account.LIABILITY),
    ("2020", "VAT Payable", Account.LIABILITY),
    ("2100", "Tips Payable", Account.LIABILITY),
    ("2200", "Salaries Payable", Account.LIABILITY),
    # EQUITY
    ("3010", "Retained Earnings", Account.EQUITY),
    ("3020", "Opening Balance Equity", Account.EQUITY),
    ("3030", "Owner Investment", Account.EQUITY),
    ("3040", "Owner Draw", Account.EQUITY),
    # REVENUE
    ("4001", "Food Sales", Account.REVENUE),
    ("4010", "Sales Revenue", Account.REVENUE),
    ("4020", "Delivery Income", Account.REVENUE),
    ("4030", "Service Revenue", Account.REVENUE),
    # COST OF SALES
    ("5001", "Cost of Goods Sold (COGS)", Account.EXPENSE),
    ("5010", "Wastage Expense", Account.EXPENSE),
    ("5020", "Inventory Shrinkage", Account.EXPENSE),
    ("5030", "Packaging", Account.EXPENSE),
    ("5040", "Staff Meals", Account.EXPENSE),
    # OPERATING EXPENSES
    ("6010", "Rent", Account.EXPENSE),
    ("6020", "Salaries & Wages", Account.EXPENSE),
    ("6030", "Utilities", Account.EXPENSE),
    ("6040", "Maintenance", Account.EXPENSE),
    ("6050", "Marketing", Account.EXPENSE),
    ("6100", "Merchant Fees", Account.EXPENSE),
    ("6200", "Office Supplies", Account.EXPENSE),
    ("6300", "Professional Fees", Account.EXPENSE),
]


@dataclass(frozen=True)
class SeedResult:
    chart: ChartOfAccounts
    created: int
    updated: int


@transaction.atomic
def seed_restaurant_chart() -> SeedResult:
    chart = ChartOfAccounts.objects.filter(code=DEFAULT_CHART_CODE).first()
    if chart is None:
        chart = ChartOfAccounts(name=DEFAULT_CHART_NAME, code=DEFAULT_CHART_CODE)
    chart.industry = "Restaurant"
    chart.is_active = True
    chart.save()

    created_count = 0
    updated_count = 0

    for code, name, account_type in RESTAURANT_ACCOUNTS:
        acc, acc_created = Account.objects.get_or_create(
            chart=chart,
            code=code,
            defaults={"name": name, "account_type": account_type, "is_active": True},
        )
        if acc_created:
            created_count += 1
            continue

        if (acc.name, acc.account_type, acc.is_active) != (name, account_type, True):
            acc.name = name
            acc.account_type = account_type
            acc.is_active = True
            acc.save(update_fields=["name", "account_type", "is_active", "updated_at"])
            updated_count += 1

    return SeedResult(chart=chart, created=created_count, updated=updated_count)
