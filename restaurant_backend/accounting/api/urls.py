# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

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

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")
router.register("ledger-entries", LedgerEntryViewSet, basename="ledger-entry")
router.register("accounts", AccountViewSet, basename="account")
router.register("expenses", ExpenseViewSet, basename="expense")
router.register("expense-categories", ExpenseCategoryViewSet, basename="expense-category")
router.register("vendors", VendorViewSet, basename="vendor")

urlpatterns = [
    path("", include(router.urls)),
    # Reports
    path("reports/trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("reports/balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("reports/pl/", ProfitAndLossView.as_view(), name="profit-and-loss"),
    path("overview/", AccountingOverviewView.as_view(), name="accounting-overview"),
    path("dashboard/", DashboardView.as_view(), name="accounting-dashboard"),
    path("variance/", VarianceView.as_view(), name="accounting-variance"),
    # Setup + posting actions
    path("settings/", AccountingSettingsView.as_view(), name="accounting-settings"),
    path("manual-entry/", ManualEntryView.as_view(), name="manual-entry"),
    path("close-period/", ClosePeriodView.as_view(), name="close-period"),
]
