# accounting/models/expense.py

"""
======================================================
PATH: accounting/models/expense.py
======================================================
EXPENSE CLAIMS

Staff submit expense claims (petty purchases, repairs, supplies) which a
manager approves or rejects.

Lifecycle:
    PENDING -> APPROVED   (posts Dr debit_account / Cr credit_account)
    PENDING -> REJECTED   (records a reason, no ledger impact)

An approved claim is immutable through save(); the only path back to
PENDING is reversing its journal entry, which the journal service handles
with a queryset update.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class ExpenseCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    debit_account = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expense_categories_debit",
        help_text="Default expense account for claims in this category",
    )
    credit_account = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expense_categories_credit",
        help_text="Default paying account (cash, petty cash, payables)",
    )

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Expense Category"
        verbose_name_plural = "Expense Categories"

    def __str__(self):
        return self.name


class Expense(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="submitted_expenses",
    )

    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )

    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses",
    )
    custom_category = models.CharField(max_length=100, blank=True, default="")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    expense_date = models.DateField(default=timezone.localdate)
    description = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_expenses",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=255, blank=True, default="")

    debit_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses_debited",
    )
    credit_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses_credited",
    )

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        indexes = [
            models.Index(fields=["expense_date"], name="acct_expense_date_idx"),
            models.Index(fields=["branch", "status"], name="acct_expense_branch_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(status="APPROVED") | Q(journal_entry__isnull=False),
                name="chk_expense_approved_requires_journal",
            ),
        ]

    def __str__(self):
        return f"Expense #{self.id} - {self.amount} ({self.status})"

    @property
    def label(self) -> str:
        if self.description:
            return self.description
        if self.category_id:
            return self.category.name
        return self.custom_category or "Miscellaneous"

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": "Amount must be greater than zero"})

        if self.debit_account_id and self.credit_account_id:
            if self.debit_account_id == self.credit_account_id:
                raise ValidationError("debit_account and credit_account must differ.")
            if self.debit_account.chart_id != self.credit_account.chart_id:
                raise ValidationError("debit_account and credit_account must belong to the same chart.")

    def save(self, *args, **kwargs):
        if self.pk and type(self).objects.filter(pk=self.pk, status=self.Status.APPROVED).exists():
            raise ValidationError("Approved expenses are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status == self.Status.APPROVED:
            raise ValidationError("Approved expenses cannot be deleted")
        return super().delete(*args, **kwargs)
