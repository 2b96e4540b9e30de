# accounting/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.journal_entry_service import create_journal_entry

User = get_user_model()


class AccountingApiTests(TestCase):
    """
    GUARANTEES:
    - Reports and postings are gated by capability
    - Domain errors surface as 400 with a detail message
    - Reversal is exposed as a POST action, never DELETE
    """

    def setUp(self):
        seed_restaurant_chart()
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.employee = User.objects.create_user(email="staff@example.com", password="pass", role="employee")

        self.cash = resolve_account(keys.CASH)
        self.revenue = resolve_account(keys.SALES_REVENUE)

    # --------------------------------------------------
    # Access
    # --------------------------------------------------
    def test_anonymous_rejected(self):
        res = self.client.get("/api/accounting/reports/trial-balance/")
        self.assertEqual(res.status_code, 401)

    def test_employee_cannot_post_manual_entry(self):
        self.client.force_authenticate(self.employee)

        res = self.client.post(
            "/api/accounting/manual-entry/",
            {"account_id": self.cash.id, "amount": "10.00", "type": "DEBIT"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    # --------------------------------------------------
    # Reports
    # --------------------------------------------------
    def test_trial_balance_for_admin(self):
        create_journal_entry(
            description="Cash sale",
            postings=[
                {"account": self.cash, "debit": "50.00"},
                {"account": self.revenue, "credit": "50.00"},
            ],
        )
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/accounting/reports/trial-balance/")

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["totals"]["balanced"])

    # --------------------------------------------------
    # Postings
    # --------------------------------------------------
    def test_manual_entry_offsets_opening_balance_equity(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(
            "/api/accounting/manual-entry/",
            {"account_id": self.cash.id, "amount": "250.00", "type": "DEBIT", "description": "Float"},
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        entry = JournalEntry.objects.get(id=res.data["entry"]["id"])
        credit = entry.ledger_entries.get(entry_type="CREDIT")
        self.assertEqual(credit.account, resolve_account(keys.OPENING_BALANCE_EQUITY))
        self.assertEqual(credit.amount, Decimal("250.00"))

    def test_unbalanced_journal_entry_returns_400(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(
            "/api/accounting/journal-entries/",
            {
                "description": "Bad entry",
                "lines": [
                    {"account_id": self.cash.id, "debit": "10.00"},
                    {"account_id": self.revenue.id, "credit": "9.00"},
                ],
            },
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertIn("detail", res.data)
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_reverse_endpoint(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/accounting/journal-entries/",
            {
                "description": "Till float",
                "lines": [
                    {"account_id": self.cash.id, "debit": "10.00"},
                    {"account_id": self.revenue.id, "credit": "10.00"},
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        entry_id = res.data["id"]

        res = self.client.post(f"/api/accounting/journal-entries/{entry_id}/reverse/", {"reason": "typo"}, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["reverses"], entry_id)

        res = self.client.post(f"/api/accounting/journal-entries/{entry_id}/reverse/", {}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_journal_entries_cannot_be_deleted_over_http(self):
        entry = create_journal_entry(
            description="Cash sale",
            postings=[
                {"account": self.cash, "debit": "5.00"},
                {"account": self.revenue, "credit": "5.00"},
            ],
        )
        self.client.force_authenticate(self.admin)

        res = self.client.delete(f"/api/accounting/journal-entries/{entry.id}/")
        self.assertEqual(res.status_code, 405)
