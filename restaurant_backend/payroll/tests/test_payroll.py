# payroll/tests/test_payroll.py

from datetime import date, datetime, time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.balance_service import get_account_balance
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.exceptions import ReversalError
from accounting.services.journal_entry_service import reverse_journal_entry
from branches.models import Branch
from payroll.models import PayrollTransaction
from payroll.services.payroll_service import (
    PayrollError,
    approve_payroll,
    hours_from_shifts,
    initiate_payroll,
    mark_failed,
    mark_paid,
    post_payroll_to_gl,
    reject_payroll,
    worked_hours,
)
from scheduling.services.attendance_service import clock_in, clock_out
from scheduling.services.shift_service import complete_shift, create_shift

User = get_user_model()


class PayrollWorkflowTests(TestCase):
    """
    GUARANTEES:
    - final_amount = hours x rate, reference PAY_<yyyymmdd>_<employee id prefix>
    - One accrual entry per posting run; rows are linked and marked POSTED
    - Payment clears Salaries Payable against the bank
    - Reversing the accrual sends rows back to PENDING so they can be re-posted
    - A paid accrual stays put until its salary payment is reversed
    """

    def setUp(self):
        seed_restaurant_chart()
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.cook = User.objects.create_user(
            email="cook@example.com",
            password="pass",
            role="chef",
            hourly_rate=Decimal("12.50"),
            default_branch=self.branch,
        )
        self.waiter = User.objects.create_user(
            email="waiter@example.com",
            password="pass",
            role="employee",
            hourly_rate=Decimal("10.00"),
        )

    def _approved(self, employee, hours):
        row = initiate_payroll(employee=employee, total_hours=hours, user=self.manager)
        return approve_payroll(row, user=self.manager)

    # --------------------------------------------------
    # Initiate
    # --------------------------------------------------
    def test_initiate_computes_amount_and_reference(self):
        row = initiate_payroll(employee=self.cook, total_hours="8", user=self.manager)

        self.assertEqual(row.final_amount, Decimal("100.00"))
        self.assertEqual(row.hourly_rate, Decimal("12.50"))
        self.assertEqual(row.branch, self.branch)
        self.assertEqual(row.status, PayrollTransaction.Status.PENDING)
        self.assertEqual(row.gl_status, PayrollTransaction.GLStatus.PENDING)

        expected = f"PAY_{timezone.localdate():%Y%m%d}_{self.cook.pk.hex[:8]}"
        self.assertEqual(row.reference, expected)

        second = initiate_payroll(employee=self.cook, total_hours="1")
        self.assertEqual(second.reference, f"{expected}_2")

    def test_initiate_rejects_bad_input(self):
        with self.assertRaises(PayrollError):
            initiate_payroll(employee=self.cook, total_hours="-1")
        with self.assertRaises(PayrollError):
            initiate_payroll(employee=self.cook, period_start=date(2024, 5, 2), period_end=date(2024, 5, 1))

        self.cook.is_active = False
        self.cook.save()
        with self.assertRaises(PayrollError):
            initiate_payroll(employee=self.cook, total_hours="1")

    def test_hours_default_to_completed_shifts(self):
        day = date(2024, 5, 6)
        done = create_shift(user=self.cook, on=day, start_time=time(9), end_time=time(13, 30), role="Line")
        complete_shift(done)
        create_shift(user=self.cook, on=day, start_time=time(18), end_time=time(22), role="Line")

        self.assertEqual(hours_from_shifts(self.cook, day, day), Decimal("4.50"))

        row = initiate_payroll(employee=self.cook, period_start=day, period_end=day)
        self.assertEqual(row.total_hours, Decimal("4.50"))
        self.assertEqual(row.final_amount, Decimal("56.25"))

    def test_clocked_time_entries_take_precedence_over_shifts(self):
        day = date(2024, 5, 6)
        complete_shift(create_shift(user=self.cook, on=day, start_time=time(9), end_time=time(13, 30), role="Line"))

        tz = timezone.get_current_timezone()
        clock_in(user=self.cook, branch=self.branch, at=timezone.make_aware(datetime.combine(day, time(9)), tz))
        clock_out(user=self.cook, at=timezone.make_aware(datetime.combine(day, time(15, 15)), tz))

        self.assertEqual(worked_hours(self.cook, day, day), Decimal("6.25"))

        row = initiate_payroll(employee=self.cook, period_start=day, period_end=day)
        self.assertEqual(row.total_hours, Decimal("6.25"))
        self.assertEqual(row.final_amount, Decimal("78.13"))

    # --------------------------------------------------
    # Review
    # --------------------------------------------------
    def test_approve_only_pending(self):
        row = self._approved(self.cook, "8")

        with self.assertRaises(PayrollError):
            approve_payroll(row, user=self.manager)

    def test_reject_appends_reason(self):
        row = initiate_payroll(employee=self.cook, total_hours="8", notes="May")

        row = reject_payroll(row, user=self.manager, reason="Wrong hours")

        self.assertEqual(row.status, PayrollTransaction.Status.REJECTED)
        self.assertIn("Rejected: Wrong hours", row.notes)

    def test_reject_after_posting_blocked(self):
        row = self._approved(self.cook, "8")
        post_payroll_to_gl([row.id], user=self.manager)

        with self.assertRaises(PayrollError):
            reject_payroll(row, user=self.manager)

    # --------------------------------------------------
    # Ledger
    # --------------------------------------------------
    def test_post_to_gl_single_entry(self):
        a = self._approved(self.cook, "8")
        b = self._approved(self.waiter, "5")
        pending = initiate_payroll(employee=self.waiter, total_hours="3")

        result = post_payroll_to_gl([a.id, b.id, pending.id], user=self.manager)

        self.assertEqual(result.posted_count, 2)
        self.assertEqual(result.total_amount, Decimal("150.00"))
        self.assertTrue(result.journal_entry.reference.startswith("PAYROLL:"))

        posted = PayrollTransaction.objects.filter(gl_status=PayrollTransaction.GLStatus.POSTED)
        self.assertEqual(set(posted.values_list("id", flat=True)), {a.id, b.id})
        self.assertTrue(all(r.journal_entry_id == result.journal_entry.id for r in posted))

        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_EXPENSE)), Decimal("150.00"))
        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_PAYABLE)), Decimal("150.00"))

    def test_post_with_nothing_eligible(self):
        row = initiate_payroll(employee=self.cook, total_hours="8")

        with self.assertRaises(PayrollError):
            post_payroll_to_gl([row.id])
        with self.assertRaises(PayrollError):
            post_payroll_to_gl([])

    def test_mark_paid_clears_payable(self):
        row = self._approved(self.cook, "8")

        with self.assertRaises(PayrollError):
            mark_paid(row, user=self.manager)

        post_payroll_to_gl([row.id], user=self.manager)
        row = mark_paid(row, user=self.manager)

        self.assertEqual(row.status, PayrollTransaction.Status.PAID)
        self.assertEqual(row.payment_journal_entry.reference, f"PAYROLL_PAYMENT:{row.reference}")
        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_PAYABLE)), Decimal("0.00"))
        self.assertEqual(get_account_balance(resolve_account(keys.BANK)), Decimal("-100.00"))

    def test_mark_failed_records_error(self):
        row = self._approved(self.cook, "8")

        row = mark_failed(row, error="Alias not found")

        self.assertEqual(row.status, PayrollTransaction.Status.FAILED)
        self.assertEqual(row.error_message, "Alias not found")

    def test_reversal_allows_reposting(self):
        row = self._approved(self.cook, "8")
        first = post_payroll_to_gl([row.id]).journal_entry

        reverse_journal_entry(first, reason="Wrong period")

        row.refresh_from_db()
        self.assertEqual(row.gl_status, PayrollTransaction.GLStatus.PENDING)
        self.assertIsNone(row.journal_entry)

        second = post_payroll_to_gl([row.id]).journal_entry
        self.assertEqual(second.reference, f"{first.reference}#2")

    def test_accrual_with_paid_rows_cannot_be_reversed(self):
        row = self._approved(self.cook, "8")
        accrual = post_payroll_to_gl([row.id]).journal_entry
        mark_paid(row, user=self.manager)

        with self.assertRaises(ReversalError):
            reverse_journal_entry(accrual)

        row.refresh_from_db()
        self.assertEqual(row.status, PayrollTransaction.Status.PAID)
        self.assertEqual(row.gl_status, PayrollTransaction.GLStatus.POSTED)
        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_PAYABLE)), Decimal("0.00"))

    def test_reversing_payment_reopens_row_for_payment(self):
        row = self._approved(self.cook, "8")
        accrual = post_payroll_to_gl([row.id]).journal_entry
        payment = mark_paid(row, user=self.manager).payment_journal_entry

        reverse_journal_entry(payment, reason="Bounced")

        row.refresh_from_db()
        self.assertEqual(row.status, PayrollTransaction.Status.APPROVED)
        self.assertIsNone(row.payment_journal_entry)
        self.assertIsNone(row.paid_at)
        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_PAYABLE)), Decimal("100.00"))

        # With the payment undone the accrual itself can be reversed.
        reverse_journal_entry(accrual)
        row.refresh_from_db()
        self.assertEqual(row.gl_status, PayrollTransaction.GLStatus.PENDING)
        self.assertEqual(get_account_balance(resolve_account(keys.SALARIES_PAYABLE)), Decimal("0.00"))

    def test_payment_can_be_recorded_again_after_reversal(self):
        row = self._approved(self.cook, "8")
        post_payroll_to_gl([row.id])
        first_payment = mark_paid(row, user=self.manager).payment_journal_entry
        reverse_journal_entry(first_payment)

        row = mark_paid(row, user=self.manager)

        self.assertEqual(row.status, PayrollTransaction.Status.PAID)
        self.assertEqual(row.payment_journal_entry.reference, f"{first_payment.reference}#2")
        self.assertEqual(get_account_balance(resolve_account(keys.BANK)), Decimal("-100.00"))


class PayrollApiTests(TestCase):
    def setUp(self):
        seed_restaurant_chart()
        self.client = APIClient()
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.cook = User.objects.create_user(
            email="cook@example.com", password="pass", role="chef", hourly_rate=Decimal("10")
        )
        self.other = User.objects.create_user(email="other@example.com", password="pass", role="employee")

    def test_manager_initiates_approves_and_posts(self):
        self.client.force_authenticate(self.manager)

        res = self.client.post(
            "/api/payroll/transactions/",
            {"employee_id": str(self.cook.pk), "total_hours": "6"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        row_id = res.data["id"]
        self.assertEqual(Decimal(res.data["final_amount"]), Decimal("60.00"))

        res = self.client.post(f"/api/payroll/transactions/{row_id}/approve/")
        self.assertEqual(res.status_code, 200, res.data)

        res = self.client.post("/api/payroll/post-gl/", {"payroll_ids": [row_id]}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["posted_count"], 1)
        self.assertEqual(res.data["total_amount"], 60.0)

        res = self.client.post("/api/payroll/post-gl/", {"payroll_ids": [row_id]}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_staff_see_only_their_own_rows(self):
        initiate_payroll(employee=self.cook, total_hours="1")
        initiate_payroll(employee=self.other, total_hours="1")
        self.client.force_authenticate(self.cook)

        res = self.client.get("/api/payroll/transactions/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["employee_email"], "cook@example.com")

    def test_staff_cannot_manage(self):
        self.client.force_authenticate(self.cook)

        res = self.client.post(
            "/api/payroll/transactions/",
            {"employee_id": str(self.cook.pk), "total_hours": "6"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(self.client.post("/api/payroll/post-gl/", {"payroll_ids": [1]}, format="json").status_code, 403)
