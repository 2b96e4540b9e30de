# accounting/tests/test_statements.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.models.period_close import PeriodClose
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import get_account_by_code, resolve_account
from accounting.services.balance_service import get_account_balance
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.dashboard_service import get_dashboard_waterfall
from accounting.services.exceptions import PeriodCloseError
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.overview_service import get_accounting_overview_kpis
from accounting.services.period_close_service import close_period
from accounting.services.profit_and_loss_service import get_profit_and_loss
from accounting.services.trial_balance_service import TrialBalanceService
from branches.models import Branch

User = get_user_model()


class FinancialStatementTests(TestCase):
    """
    Statement tests over a small ledger:
    - 100.00 cash sale (Dr Cash / Cr Food Sales)
    - 30.00 rent paid in cash (Dr Rent / Cr Cash)
    """

    def setUp(self):
        seed_restaurant_chart()
        self.user = User.objects.create_user(email="owner@example.com", password="pass", role="admin")
        self.cash = resolve_account(keys.CASH)
        self.revenue = resolve_account(keys.SALES_REVENUE)
        self.rent = get_account_by_code("6010")
        self.retained = resolve_account(keys.RETAINED_EARNINGS)

        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")

    def _post(self, debit_account, credit_account, amount, *, posted_at=None, branch=None):
        return create_journal_entry(
            description="Test posting",
            postings=[
                {"account": debit_account, "debit": amount},
                {"account": credit_account, "credit": amount},
            ],
            posted_at=posted_at,
            branch=branch,
            user=self.user,
        )

    def _seed_month(self, posted_at=None):
        self._post(self.cash, self.revenue, "100.00", posted_at=posted_at, branch=self.downtown)
        self._post(self.rent, self.cash, "30.00", posted_at=posted_at, branch=self.downtown)

    # --------------------------------------------------
    # Trial balance
    # --------------------------------------------------

    def test_trial_balance_is_balanced_and_skips_idle_accounts(self):
        self._seed_month()

        report = TrialBalanceService().generate()

        codes = [row["account_code"] for row in report["accounts"]]
        self.assertEqual(codes, ["1010", "4001", "6010"])
        self.assertEqual(report["totals"]["debit"], 130.0)
        self.assertEqual(report["totals"]["credit"], 130.0)
        self.assertEqual(report["totals"]["debit_minor"], 13000)
        self.assertTrue(report["totals"]["balanced"])

    def test_trial_balance_as_of_excludes_later_postings(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        self._post(self.cash, self.revenue, "10.00", posted_at=yesterday)
        self._post(self.cash, self.revenue, "20.00")

        report = TrialBalanceService().generate(as_of=yesterday)
        self.assertEqual(report["totals"]["debit"], 10.0)

    # --------------------------------------------------
    # Profit and loss
    # --------------------------------------------------

    def test_profit_and_loss_totals(self):
        self._seed_month()

        report = get_profit_and_loss()

        self.assertEqual(report["income"], 100.0)
        self.assertEqual(report["expenses"], 30.0)
        self.assertEqual(report["net_profit"], 70.0)
        self.assertEqual(report["margin_pct"], 70.0)
        self.assertEqual([a["code"] for a in report["revenue_accounts"]], ["4001"])
        self.assertEqual([a["code"] for a in report["expense_accounts"]], ["6010"])

    def test_profit_and_loss_filters_by_branch(self):
        self._seed_month()
        self._post(self.cash, self.revenue, "50.00", branch=self.airport)

        report = get_profit_and_loss(branch_ids=[self.airport.id])
        self.assertEqual(report["income"], 50.0)
        self.assertEqual(report["expenses"], 0.0)

    def test_margin_is_zero_without_revenue(self):
        self._post(self.rent, self.cash, "30.00")
        self.assertEqual(get_profit_and_loss()["margin_pct"], 0.0)

    # --------------------------------------------------
    # Balance sheet
    # --------------------------------------------------

    def test_balance_sheet_rolls_current_earnings_into_equity(self):
        self._seed_month()

        sheet = generate_balance_sheet()

        self.assertEqual(sheet["totals"]["assets"], 70.0)
        self.assertEqual(sheet["totals"]["equity"], 70.0)
        self.assertTrue(sheet["totals"]["balanced"])
        equity_codes = [line["code"] for line in sheet["equity"]]
        self.assertIn("3999", equity_codes)

    def test_branch_slice_may_be_unbalanced_without_raising(self):
        create_journal_entry(
            description="Cash counted at Downtown for Airport sales",
            postings=[
                {"account": self.cash, "debit": "50.00", "branch": self.downtown},
                {"account": self.revenue, "credit": "50.00", "branch": self.airport},
            ],
        )

        sheet = generate_balance_sheet(branch_ids=[self.downtown.id])

        self.assertEqual(sheet["totals"]["assets"], 50.0)
        self.assertFalse(sheet["totals"]["balanced"])

    # --------------------------------------------------
    # Period close
    # --------------------------------------------------

    def _last_month(self):
        end = timezone.localdate().replace(day=1) - timedelta(days=1)
        return end.replace(day=1), end

    def test_close_period_moves_profit_to_retained_earnings(self):
        start, end = self._last_month()
        self._seed_month(posted_at=start)

        result = close_period(start_date=start, end_date=end, user=self.user)

        self.assertEqual(result.total_revenue, Decimal("100.00"))
        self.assertEqual(result.total_expenses, Decimal("30.00"))
        self.assertEqual(result.net_profit, Decimal("70.00"))
        self.assertEqual(get_account_balance(self.revenue, as_of=end), Decimal("0.00"))
        self.assertEqual(get_account_balance(self.rent, as_of=end), Decimal("0.00"))
        self.assertEqual(get_account_balance(self.retained, as_of=end), Decimal("70.00"))
        self.assertTrue(PeriodClose.objects.filter(start_date=start, end_date=end).exists())

        sheet = generate_balance_sheet(as_of=end)
        self.assertTrue(sheet["totals"]["balanced"])

    def test_close_period_rejects_overlap_future_and_empty(self):
        start, end = self._last_month()
        self._seed_month(posted_at=start)
        close_period(start_date=start, end_date=end)

        with self.assertRaises(PeriodCloseError):
            close_period(start_date=end, end_date=end)

        tomorrow = timezone.localdate() + timedelta(days=1)
        with self.assertRaises(PeriodCloseError):
            close_period(start_date=tomorrow, end_date=tomorrow)

        older_end = start - timedelta(days=1)
        with self.assertRaises(PeriodCloseError):
            close_period(start_date=older_end.replace(day=1), end_date=older_end)


class DashboardAndOverviewTests(TestCase):
    """
    GUARANTEES:
    - Waterfall rows run Total Revenue, VAT, Merchant Fees, COGS, Net Profit
    - A missing mapped account yields the "Accounts missing" payload, not an error
    - Overview KPIs fold unclosed earnings into equity
    """

    def setUp(self):
        seed_restaurant_chart()
        self.user = User.objects.create_user(email="owner@example.com", password="pass", role="admin")
        self.cash = resolve_account(keys.CASH)
        self.revenue = resolve_account(keys.SALES_REVENUE)
        self.vat = resolve_account(keys.VAT_PAYABLE)
        self.fees = resolve_account(keys.MERCHANT_FEES)
        self.cogs = resolve_account(keys.COGS)
        self.inventory = resolve_account(keys.INVENTORY)
        self.rent = get_account_by_code("6010")

    def _post(self, postings, posted_at=None):
        return create_journal_entry(
            description="Dashboard fixture",
            postings=postings,
            posted_at=posted_at,
            user=self.user,
        )

    def _seed_trading(self):
        self._post([
            {"account": self.cash, "debit": "116.00"},
            {"account": self.revenue, "credit": "100.00"},
            {"account": self.vat, "credit": "16.00"},
        ])
        self._post([
            {"account": self.fees, "debit": "3.00"},
            {"account": self.cash, "credit": "3.00"},
        ])
        self._post([
            {"account": self.cogs, "debit": "40.00"},
            {"account": self.inventory, "credit": "40.00"},
        ])

    # --------------------------------------------------
    # Waterfall
    # --------------------------------------------------

    def test_waterfall_rows_and_metrics(self):
        self._seed_trading()

        data = get_dashboard_waterfall()

        rows = [(row["name"], row["value"]) for row in data["waterfall"]]
        self.assertEqual(
            rows,
            [
                ("Total Revenue", 116.0),
                ("VAT (16%)", -16.0),
                ("Merchant Fees", -3.0),
                ("COGS", -40.0),
                ("Net Profit", 57.0),
            ],
        )
        self.assertEqual(
            data["metrics"],
            {
                "monthly_revenue": 100.0,
                "monthly_expenses": 43.0,
                "net_profit": 57.0,
                "total_collected": 116.0,
            },
        )
        self.assertNotIn("error", data)

    def test_waterfall_ignores_postings_outside_window(self):
        last_month = timezone.localdate().replace(day=1) - timedelta(days=1)
        self._post(
            [
                {"account": self.cash, "debit": "50.00"},
                {"account": self.revenue, "credit": "50.00"},
            ],
            posted_at=last_month,
        )

        data = get_dashboard_waterfall()

        self.assertEqual(data["metrics"]["monthly_revenue"], 0.0)
        self.assertEqual(data["waterfall"][0]["value"], 0.0)

    def test_missing_account_returns_empty_payload(self):
        self.fees.is_active = False
        self.fees.save()

        data = get_dashboard_waterfall()

        self.assertEqual(data["error"], "Accounts missing")
        self.assertEqual(data["missing"], [keys.MERCHANT_FEES])
        self.assertEqual(data["waterfall"], [])
        self.assertEqual(
            data["metrics"],
            {"monthly_revenue": 0.0, "monthly_expenses": 0.0, "net_profit": 0.0, "total_collected": 0.0},
        )

    def test_dashboard_endpoint_reports_missing_accounts_with_200(self):
        self.fees.is_active = False
        self.fees.save()
        client = APIClient()
        client.force_authenticate(self.user)

        res = client.get("/api/accounting/dashboard/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["error"], "Accounts missing")

    # --------------------------------------------------
    # Overview KPIs
    # --------------------------------------------------

    def test_overview_kpis(self):
        last_month = timezone.localdate().replace(day=1) - timedelta(days=1)
        self._post(
            [
                {"account": self.cash, "debit": "100.00"},
                {"account": self.revenue, "credit": "100.00"},
            ],
            posted_at=last_month,
        )
        self._post(
            [
                {"account": self.rent, "debit": "30.00"},
                {"account": self.cash, "credit": "30.00"},
            ],
            posted_at=last_month,
        )
        self._post([
            {"account": self.cash, "debit": "50.00"},
            {"account": self.revenue, "credit": "50.00"},
        ])

        today = timezone.localdate()
        data = get_accounting_overview_kpis(start_date=today.replace(day=1), end_date=today)

        self.assertEqual(data["assets"], 120.0)
        self.assertEqual(data["assets_minor"], 12000)
        self.assertEqual(data["liabilities"], 0.0)
        self.assertEqual(data["equity"], 120.0)
        self.assertEqual(data["revenue"], 50.0)
        self.assertEqual(data["expenses"], 0.0)
        self.assertEqual(data["net_profit"], 50.0)
        self.assertEqual(data["as_of_date"], today.isoformat())
        self.assertEqual(data["period"]["start_date"], today.replace(day=1).isoformat())
