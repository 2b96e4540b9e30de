# payroll/models.py

"""
======================================================
PATH: payroll/models.py
======================================================
PAYROLL TRANSACTION

One salary payment for one employee and period.

status     PENDING -> APPROVED -> PAID
           PENDING/APPROVED -> REJECTED
           APPROVED -> FAILED (payout failed)
gl_status  PENDING -> POSTED once the accrual (Dr Salaries Expense /
           Cr Salaries Payable) is in the ledger; a reversal of that entry
           puts the row back to PENDING. An accrual with PAID rows cannot be
           reversed until their salary payments are; reversing a payment
           puts its row back to APPROVED.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q


class PayrollTransaction(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending Approval"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"
        PAID = "PAID", "Paid"
        FAILED = "FAILED", "Failed"

    class GLStatus(models.TextChoices):
        PENDING = "PENDING", "Not Posted"
        POSTED = "POSTED", "Posted"

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payroll_transactions",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payroll_transactions",
    )

    total_hours = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    final_amount = models.DecimalField(max_digits=14, decimal_places=2)

    period_start = models.DateField()
    period_end = models.DateField()

    reference = models.CharField(max_length=40, unique=True)

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    gl_status = models.CharField(
        max_length=10,
        choices=GLStatus.choices,
        default=GLStatus.PENDING,
        db_index=True,
    )

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payroll_transactions",
    )
    payment_journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payroll_payments",
    )

    notes = models.TextField(blank=True, default="")
    error_message = models.CharField(max_length=255, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payroll_initiated",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payroll_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "gl_status"], name="pay_status_gl_idx"),
            models.Index(fields=["employee", "period_start"], name="pay_employee_period_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(period_end__gte=F("period_start")),
                name="chk_payroll_period_end_gte_start",
            ),
            models.CheckConstraint(
                condition=Q(gl_status="PENDING") | Q(journal_entry__isnull=False),
                name="chk_payroll_posted_has_entry",
            ),
        ]

    def __str__(self):
        return f"{self.reference} {self.final_amount} ({self.status})"

    def clean(self):
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValidationError({"period_end": "period_end must be on or after period_start"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
