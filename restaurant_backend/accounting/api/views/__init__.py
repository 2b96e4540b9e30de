# accounting/api/views/__init__.py

"""
accounting.api.views package

Journal/ledger ViewSets live in accounting.api.view (singular).
Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.view import JournalEntryViewSet, LedgerEntryViewSet
from accounting.api.views.accounts import AccountingSettingsView, AccountViewSet
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.close_period import ClosePeriodView
from accounting.api.views.dashboard import DashboardView
from accounting.api.views.expenses import ExpenseCategoryViewSet, ExpenseViewSet
from accounting.api.views.manual_entry import ManualEntryView
from accounting.api.views.overview import AccountingOverviewView
from accounting.api.views.profit_and_loss import ProfitAndLossView
from accounting.api.views.trial_balance import TrialBalanceView
from accounting.api.views.variance import VarianceView
from accounting.api.views.vendors import VendorViewSet

__all__ = [
    "JournalEntryViewSet",
    "LedgerEntryViewSet",
    "AccountViewSet",
    "AccountingSettingsView",
    "TrialBalanceView",
    "BalanceSheetView",
    "ProfitAndLossView",
    "AccountingOverviewView",
    "DashboardView",
    "VarianceView",
    "ManualEntryView",
    "ExpenseViewSet",
    "ExpenseCategoryViewSet",
    "ClosePeriodView",
    "VendorViewSet",
]
