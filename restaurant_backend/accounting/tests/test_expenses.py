# accounting/tests/test_expenses.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.expense import Expense, ExpenseCategory
from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import get_account_by_code
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.exceptions import ExpenseWorkflowError
from accounting.services.expense_service import approve_expense, reject_expense, submit_expense
from accounting.services.journal_entry_service import reverse_journal_entry
from branches.models import Branch

User = get_user_model()


class ExpenseWorkflowTests(TestCase):
    """
    Expense claim lifecycle.

    GUARANTEES:
    - Approval posts exactly one balanced entry dated at the expense date
    - Reviewed claims cannot be reviewed again
    - Reversing the entry sends the claim back to PENDING
    """

    def setUp(self):
        seed_restaurant_chart()
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.employee = User.objects.create_user(email="cook@example.com", password="pass", role="chef")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")

        self.maintenance = get_account_by_code("6040")
        self.petty_cash = get_account_by_code("1015")
        self.category = ExpenseCategory.objects.create(
            name="Repairs",
            debit_account=self.maintenance,
            credit_account=self.petty_cash,
        )

    def _submit(self, amount="45.50"):
        return submit_expense(
            submitted_by=self.employee,
            amount=amount,
            description="Fix fryer",
            category=self.category,
            branch=self.branch,
        )

    def test_submit_defaults_accounts_from_category(self):
        expense = self._submit()

        self.assertEqual(expense.status, Expense.Status.PENDING)
        self.assertEqual(expense.debit_account, self.maintenance)
        self.assertEqual(expense.credit_account, self.petty_cash)
        self.assertIsNone(expense.journal_entry)

    def test_submit_rejects_non_positive_amount(self):
        with self.assertRaises(ExpenseWorkflowError):
            self._submit(amount="0")

    def test_approve_posts_balanced_entry(self):
        expense = self._submit()

        result = approve_expense(expense, reviewer=self.manager)

        entry = result.journal_entry
        self.assertEqual(result.expense.status, Expense.Status.APPROVED)
        self.assertEqual(entry.reference, f"EXPENSE:{expense.id}")
        self.assertEqual(entry.source_type, JournalEntry.SourceType.EXPENSE)
        self.assertEqual(entry.branch, self.branch)
        self.assertEqual(entry.posted_at.date(), expense.expense_date)

        debit = entry.ledger_entries.get(entry_type="DEBIT")
        credit = entry.ledger_entries.get(entry_type="CREDIT")
        self.assertEqual((debit.account, debit.amount), (self.maintenance, Decimal("45.50")))
        self.assertEqual((credit.account, credit.amount), (self.petty_cash, Decimal("45.50")))

    def test_approve_requires_accounts(self):
        expense = submit_expense(submitted_by=self.employee, amount="10", custom_category="Taxi")

        with self.assertRaises(ExpenseWorkflowError):
            approve_expense(expense, reviewer=self.manager)

    def test_reviewed_expense_cannot_be_reviewed_again(self):
        expense = self._submit()
        approve_expense(expense, reviewer=self.manager)

        with self.assertRaises(ExpenseWorkflowError):
            approve_expense(expense, reviewer=self.manager)
        with self.assertRaises(ExpenseWorkflowError):
            reject_expense(expense, reviewer=self.manager)

    def test_approved_expense_is_immutable(self):
        expense = approve_expense(self._submit(), reviewer=self.manager).expense

        expense.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            expense.save()
        with self.assertRaises(ValidationError):
            expense.delete()

    def test_reject_records_reason_without_ledger_impact(self):
        expense = reject_expense(self._submit(), reviewer=self.manager, reason="No receipt")

        self.assertEqual(expense.status, Expense.Status.REJECTED)
        self.assertEqual(expense.rejection_reason, "No receipt")
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_reversal_reopens_claim_and_reapproval_uses_new_reference(self):
        expense = self._submit()
        first = approve_expense(expense, reviewer=self.manager).journal_entry

        reverse_journal_entry(first, reason="Wrong account")
        expense.refresh_from_db()
        self.assertEqual(expense.status, Expense.Status.PENDING)
        self.assertIsNone(expense.journal_entry)

        second = approve_expense(expense, reviewer=self.manager).journal_entry
        self.assertEqual(second.reference, f"EXPENSE:{expense.id}#2")


class ExpenseApiTests(TestCase):
    def setUp(self):
        seed_restaurant_chart()
        self.client = APIClient()
        self.branch = Branch.objects.create(name="Downtown", code="DT")

        self.employee = User.objects.create_user(email="waiter@example.com", password="pass", role="employee")
        self.employee.branches.add(self.branch)
        self.manager = User.objects.create_user(email="boss@example.com", password="pass", role="manager")
        self.manager.branches.add(self.branch)

        self.category = ExpenseCategory.objects.create(
            name="Supplies",
            debit_account=get_account_by_code("6200"),
            credit_account=get_account_by_code("1015"),
        )

    def test_employee_submits_and_sees_only_own_claims(self):
        self.client.force_authenticate(self.employee)

        res = self.client.post(
            "/api/accounting/expenses/",
            {"amount": "12.00", "category_id": self.category.id, "branch_id": self.branch.id},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        Expense.objects.create(submitted_by=self.manager, amount=Decimal("5.00"))

        res = self.client.get("/api/accounting/expenses/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

    def test_employee_cannot_approve(self):
        expense = submit_expense(submitted_by=self.employee, amount="8", category=self.category)
        self.client.force_authenticate(self.employee)

        res = self.client.post(f"/api/accounting/expenses/{expense.id}/approve/", {}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_manager_approves(self):
        expense = submit_expense(
            submitted_by=self.employee, amount="8", category=self.category, branch=self.branch
        )
        self.client.force_authenticate(self.manager)

        res = self.client.post(f"/api/accounting/expenses/{expense.id}/approve/", {}, format="json")

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["expense"]["status"], "APPROVED")
        self.assertTrue(JournalEntry.objects.filter(id=res.data["journal_entry_id"]).exists())
