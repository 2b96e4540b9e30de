# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.chart_seed import seed_restaurant_chart
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    ReversalError,
    UnbalancedEntryError,
)
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reposting_reference_id,
    reverse_journal_entry,
)
from accounting.services.period_close_service import close_period

User = get_user_model()


class JournalIntegrityTests(TestCase):
    """
    Journal engine tests.

    GUARANTEES:
    - Debits always equal credits
    - Journal + ledger rows are immutable
    - A reference posts at most once
    - Closed periods reject new postings
    """

    def setUp(self):
        self.chart = seed_restaurant_chart().chart
        self.user = User.objects.create_user(email="accountant@example.com", password="pass", role="admin")
        self.cash = resolve_account(keys.CASH)
        self.revenue = resolve_account(keys.SALES_REVENUE)

    def _sale(self, amount="100.00", **kwargs):
        return create_journal_entry(
            description="Cash sale",
            postings=[
                {"account": self.cash, "debit": amount},
                {"account": self.revenue, "credit": amount},
            ],
            user=self.user,
            **kwargs,
        )

    # --------------------------------------------------
    # Balancing
    # --------------------------------------------------

    def test_balanced_entry_creates_two_lines(self):
        entry = self._sale()

        lines = LedgerEntry.objects.filter(journal_entry=entry)
        self.assertEqual(lines.count(), 2)
        self.assertEqual(lines.get(entry_type=LedgerEntry.DEBIT).amount, Decimal("100.00"))
        self.assertEqual(lines.get(entry_type=LedgerEntry.CREDIT).amount, Decimal("100.00"))
        self.assertEqual(entry.created_by, self.user)

    def test_unbalanced_entry_is_rejected_and_nothing_is_written(self):
        with self.assertRaises(UnbalancedEntryError) as ctx:
            create_journal_entry(
                description="Broken",
                postings=[
                    {"account": self.cash, "debit": "100.00"},
                    {"account": self.revenue, "credit": "90.00"},
                ],
            )

        self.assertEqual(ctx.exception.debits, Decimal("100.00"))
        self.assertEqual(ctx.exception.credits, Decimal("90.00"))
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_amounts_are_rounded_to_cents(self):
        entry = self._sale(amount="10.005")
        self.assertEqual(entry.ledger_entries.first().amount, Decimal("10.01"))

    def test_line_with_both_sides_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Both sides",
                postings=[
                    {"account": self.cash, "debit": "5", "credit": "5"},
                    {"account": self.revenue, "credit": "5"},
                ],
            )

    def test_empty_postings_and_description_are_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(description="Nothing", postings=[])
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="  ",
                postings=[
                    {"account": self.cash, "debit": "1"},
                    {"account": self.revenue, "credit": "1"},
                ],
            )

    def test_inactive_account_is_rejected(self):
        self.revenue.is_active = False
        self.revenue.save()

        with self.assertRaises(JournalEntryCreationError):
            self._sale()

    def test_cross_chart_postings_are_rejected(self):
        other = ChartOfAccounts.objects.create(name="Other", code="other", is_active=False)
        foreign = Account.objects.create(chart=other, code="1010", name="Cash", account_type=Account.ASSET)

        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Cross chart",
                postings=[
                    {"account": foreign, "debit": "5"},
                    {"account": self.revenue, "credit": "5"},
                ],
            )

    # --------------------------------------------------
    # Immutability
    # --------------------------------------------------

    def test_journal_entry_cannot_be_modified_or_deleted(self):
        entry = self._sale()

        entry.description = "Changed"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_ledger_entry_cannot_be_modified_or_deleted(self):
        line = self._sale().ledger_entries.first()

        line.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()

    def test_account_with_history_cannot_be_deleted(self):
        self._sale()
        with self.assertRaises(ValidationError):
            self.cash.delete()

    # --------------------------------------------------
    # Idempotency
    # --------------------------------------------------

    def test_duplicate_reference_is_rejected(self):
        self._sale(reference_type="SALES", reference_id="2024-05-01")

        with self.assertRaises(IdempotencyError):
            self._sale(reference_type="SALES", reference_id="2024-05-01")

        self.assertEqual(JournalEntry.objects.filter(reference="SALES:2024-05-01").count(), 1)

    def test_entries_without_reference_do_not_collide(self):
        self._sale()
        self._sale()
        self.assertEqual(JournalEntry.objects.filter(reference__isnull=True).count(), 2)

    # --------------------------------------------------
    # Reversal
    # --------------------------------------------------

    def test_reversal_mirrors_lines_and_links_back(self):
        entry = self._sale(amount="40.00")

        reversal = reverse_journal_entry(entry, reason="Keyed twice", user=self.user)

        self.assertEqual(reversal.reverses, entry)
        self.assertEqual(reversal.source_type, JournalEntry.SourceType.REVERSAL)
        self.assertEqual(reversal.reference, f"REVERSAL:{entry.id}")
        self.assertIn("Keyed twice", reversal.description)
        self.assertTrue(entry.is_reversed)

        debit = reversal.ledger_entries.get(entry_type=LedgerEntry.DEBIT)
        credit = reversal.ledger_entries.get(entry_type=LedgerEntry.CREDIT)
        self.assertEqual(debit.account, self.revenue)
        self.assertEqual(credit.account, self.cash)

    def test_entry_cannot_be_reversed_twice(self):
        entry = self._sale()
        reverse_journal_entry(entry)

        with self.assertRaises(ReversalError):
            reverse_journal_entry(entry)

    def test_reversal_cannot_be_reversed(self):
        reversal = reverse_journal_entry(self._sale())

        with self.assertRaises(ReversalError):
            reverse_journal_entry(reversal)

    def test_reposting_reference_gets_suffix_after_reversal(self):
        self.assertEqual(reposting_reference_id("EXPENSE", 7), "7")

        entry = self._sale(reference_type="EXPENSE", reference_id="7")
        self.assertEqual(reposting_reference_id("EXPENSE", 7), "7")

        reverse_journal_entry(entry)
        self.assertEqual(reposting_reference_id("EXPENSE", 7), "7#2")

    # --------------------------------------------------
    # Period lock
    # --------------------------------------------------

    def test_posting_into_closed_period_is_rejected(self):
        today = timezone.localdate()
        first_of_month = today.replace(day=1)
        last_month_end = first_of_month - timedelta(days=1)
        last_month_start = last_month_end.replace(day=1)

        self._sale(posted_at=last_month_start)
        close_period(start_date=last_month_start, end_date=last_month_end, user=self.user)

        with self.assertRaises(JournalEntryCreationError):
            self._sale(posted_at=last_month_end)

        # Current period is still open.
        self._sale(posted_at=today)

    def test_period_close_entry_cannot_be_reversed(self):
        today = timezone.localdate()
        last_month_end = today.replace(day=1) - timedelta(days=1)
        last_month_start = last_month_end.replace(day=1)

        self._sale(posted_at=last_month_start)
        result = close_period(start_date=last_month_start, end_date=last_month_end, user=self.user)

        with self.assertRaises(ReversalError):
            reverse_journal_entry(result.journal_entry, user=self.user)

        self.assertFalse(result.journal_entry.is_reversed)
        self.assertFalse(
            JournalEntry.objects.filter(source_type=JournalEntry.SourceType.REVERSAL).exists()
        )
