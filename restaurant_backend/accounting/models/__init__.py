# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Keep this file imports-only; models never import services at module level.
"""

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.models.expense import Expense, ExpenseCategory
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.models.mapping import AccountingMapping
from accounting.models.period_close import PeriodClose
from accounting.models.vendor import Vendor

__all__ = [
    "ChartOfAccounts",
    "Account",
    "AccountingMapping",
    "JournalEntry",
    "LedgerEntry",
    "Expense",
    "ExpenseCategory",
    "PeriodClose",
    "Vendor",
]
