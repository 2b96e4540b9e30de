# accounting/tests/test_variance.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.variance_service import compute_variance
from branches.models import Branch
from recipes.models import SalesReport

User = get_user_model()


class VarianceTests(TestCase):
    """
    GUARANTEES:
    - Theoretical figures come from successful sales reports only
    - Actual figures come from the ledger
    - A line within tolerance is OK; beyond it, OVER or UNDER by sign
    - Without a theoretical figure only the absolute tolerance applies
    """

    def setUp(self):
        seed_restaurant_chart()
        self.today = timezone.localdate()
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.user = User.objects.create_user(email="owner@example.com", password="pass", role="admin")

        SalesReport.objects.create(
            branch=self.branch,
            report_date=self.today,
            net_revenue=Decimal("1000.00"),
            total_cogs=Decimal("250.00"),
        )

        self._post(keys.CASH, keys.SALES_REVENUE, "1000.00")
        self._post(keys.COGS, keys.INVENTORY, "300.00")

    def _post(self, debit_key, credit_key, amount):
        create_journal_entry(
            description="Variance fixture",
            postings=[
                {"account": resolve_account(debit_key), "debit": amount},
                {"account": resolve_account(credit_key), "credit": amount},
            ],
            branch=self.branch,
            user=self.user,
        )

    def _lines(self, **kwargs):
        data = compute_variance(start_date=self.today, end_date=self.today, **kwargs)
        return data, {line["metric"]: line for line in data["lines"]}

    def test_cogs_over_and_revenue_ok(self):
        data, lines = self._lines(tolerance_pct=5, tolerance_abs=10)

        self.assertEqual(lines["revenue"]["status"], "OK")
        self.assertEqual(lines["cogs"]["status"], "OVER")
        self.assertEqual(lines["cogs"]["variance"], 50.0)
        self.assertEqual(lines["cogs"]["variance_pct"], 20.0)
        self.assertTrue(data["has_exceptions"])

    def test_wide_tolerance_clears_exceptions(self):
        data, lines = self._lines(tolerance_pct=25, tolerance_abs=0)

        self.assertEqual(lines["cogs"]["status"], "OK")
        self.assertFalse(data["has_exceptions"])

    def test_failed_reports_are_ignored(self):
        SalesReport.objects.create(
            branch=self.branch,
            report_date=self.today,
            net_revenue=Decimal("5000.00"),
            status=SalesReport.Status.FAILED,
        )

        _, lines = self._lines(tolerance_pct=5, tolerance_abs=10)
        self.assertEqual(lines["revenue"]["theoretical"], 1000.0)

    def test_actual_below_theoretical_is_under(self):
        SalesReport.objects.create(
            branch=self.branch,
            report_date=self.today,
            net_revenue=Decimal("500.00"),
            status=SalesReport.Status.THEORETICAL_ONLY,
        )

        _, lines = self._lines(tolerance_pct=5, tolerance_abs=10)
        self.assertEqual(lines["revenue"]["status"], "UNDER")

    def test_negative_tolerance_rejected(self):
        with self.assertRaises(ValueError):
            compute_variance(start_date=self.today, end_date=self.today, tolerance_pct=-1)

    def test_ledger_revenue_without_sales_reports_is_flagged(self):
        SalesReport.objects.all().delete()

        data, lines = self._lines(tolerance_pct=5, tolerance_abs=10)

        self.assertEqual(lines["revenue"]["theoretical"], 0.0)
        self.assertEqual(lines["revenue"]["variance_pct"], 0.0)
        self.assertEqual(lines["revenue"]["status"], "OVER")
        self.assertEqual(lines["cogs"]["status"], "OVER")
        self.assertTrue(data["has_exceptions"])

    def test_small_gap_without_sales_reports_is_ok(self):
        SalesReport.objects.all().delete()

        _, lines = self._lines(tolerance_pct=5, tolerance_abs=1000)

        self.assertEqual(lines["revenue"]["status"], "OK")
