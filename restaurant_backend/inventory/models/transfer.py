# inventory/models/transfer.py

"""
TRANSFER REQUEST MODELS

Moves stock between two branches.

REQUESTED -> IN_TRANSIT (send: stock leaves the source)
IN_TRANSIT -> RECEIVED  (receive: stock lands at the destination)
REQUESTED -> CANCELLED
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from accounting.services.money import q2
from inventory.models.product import Product
from inventory.models.stock import QUANTITY_DIGITS


class TransferRequest(models.Model):
    class Status(models.TextChoices):
        REQUESTED = "REQUESTED", "Requested"
        IN_TRANSIT = "IN_TRANSIT", "In Transit"
        RECEIVED = "RECEIVED", "Received"
        CANCELLED = "CANCELLED", "Cancelled"

    from_branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="transfers_out",
    )
    to_branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="transfers_in",
    )

    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.REQUESTED,
        db_index=True,
    )

    notes = models.TextField(blank=True, default="")

    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfers_requested",
    )
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfers_sent",
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfers_received",
    )

    sent_at = models.DateTimeField(null=True, blank=True)
    received_at = models.DateTimeField(null=True, blank=True)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_transfers",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_branch=F("to_branch")),
                name="chk_transfer_distinct_branches",
            ),
        ]

    def __str__(self):
        return f"Transfer #{self.pk} {self.from_branch_id} -> {self.to_branch_id} ({self.status})"

    @property
    def total_value(self) -> Decimal:
        return q2(sum((item.line_value for item in self.items.all()), Decimal("0")))

    def clean(self):
        if self.from_branch_id and self.from_branch_id == self.to_branch_id:
            raise ValidationError("Source and destination branches must be different")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class TransferItem(models.Model):
    transfer = models.ForeignKey(
        TransferRequest,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="transfer_items",
    )
    quantity = models.DecimalField(
        validators=[MinValueValidator(Decimal("0.001"))],
        **QUANTITY_DIGITS,
    )

    # Snapshot taken when the goods leave the source branch.
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} x {self.product_id}"

    @property
    def line_value(self) -> Decimal:
        return q2((self.quantity or Decimal("0")) * (self.unit_cost or Decimal("0")))
