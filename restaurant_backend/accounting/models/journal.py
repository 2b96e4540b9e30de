# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

A single accounting transaction (journal header).

Guarantees:
- Immutable once created (no updates, no deletes); mistakes are undone by a
  reversal entry that points back at the original via `reverses`
- Idempotency via reference uniqueness (when reference is provided)
- posted_at is the accounting effective date (used for period locks and reports)
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JournalEntry(models.Model):
    class SourceType(models.TextChoices):
        MANUAL = "MANUAL", "Manual Entry"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"
        EXPENSE = "EXPENSE", "Expense"
        PAYROLL = "PAYROLL", "Payroll"
        PURCHASE = "PURCHASE", "Purchase Receipt"
        WASTE = "WASTE", "Waste"
        TRANSFER = "TRANSFER", "Stock Transfer"
        STOCK_COUNT = "STOCK_COUNT", "Stock Count"
        SALES = "SALES", "Sales"
        PERIOD_CLOSE = "PERIOD_CLOSE", "Period Close"
        REVERSAL = "REVERSAL", "Reversal"

    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Idempotency reference, e.g. PURCHASE:12 or PAYROLL:2024-05-31",
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    source_type = models.CharField(
        max_length=20,
        choices=SourceType.choices,
        default=SourceType.MANUAL,
        db_index=True,
    )

    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="journal_entries",
    )

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversed_by",
        help_text="The entry this one reverses (set on reversal entries only).",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="journal_entries",
    )

    posted_at = models.DateTimeField(
        default=timezone.now,
        help_text="Accounting effective date",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-posted_at", "-created_at"]
        indexes = [
            models.Index(fields=["posted_at"], name="acct_journal_posted_idx"),
            models.Index(fields=["reference"], name="acct_journal_reference_idx"),
            models.Index(fields=["branch", "posted_at"], name="acct_journal_branch_posted_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_journal_reference_not_blank",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.id} - {self.posted_at.date()}"

    @property
    def is_reversed(self) -> bool:
        return JournalEntry.objects.filter(reverses_id=self.pk).exists()

    def clean(self):
        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.posted_at and timezone.is_naive(self.posted_at):
            self.posted_at = timezone.make_aware(self.posted_at, timezone.get_current_timezone())

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "JournalEntry records are immutable and cannot be deleted; post a reversal instead"
        )
