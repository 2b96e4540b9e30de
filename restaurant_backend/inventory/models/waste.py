# inventory/models/waste.py

"""
WASTE LOG

Append-only record of stock thrown away (or eaten by staff).
cost_impact is fixed at creation: product.cost x quantity, 2dp.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from inventory.models.product import Product
from inventory.models.stock import QUANTITY_DIGITS


class WasteLog(models.Model):
    class Reason(models.TextChoices):
        SPOILAGE = "SPOILAGE", "Spoilage"
        DAMAGE = "DAMAGE", "Damage"
        EXPIRED = "EXPIRED", "Expired"
        STAFF_MEAL = "STAFF_MEAL", "Staff Meal"
        OTHER = "OTHER", "Other"

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="waste_logs",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="waste_logs",
    )

    quantity = models.DecimalField(
        validators=[MinValueValidator(Decimal("0.001"))],
        **QUANTITY_DIGITS,
    )
    reason = models.CharField(max_length=20, choices=Reason.choices, db_index=True)

    cost_impact = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.CharField(max_length=255, blank=True, default="")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="waste_logs",
    )

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="waste_logs",
    )

    occurred_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-occurred_at", "-id"]
        indexes = [
            models.Index(fields=["branch", "occurred_at"], name="inv_waste_branch_when_idx"),
            models.Index(fields=["reason", "occurred_at"], name="inv_waste_reason_when_idx"),
        ]

    def __str__(self):
        return f"Waste {self.quantity} x {self.product_id} ({self.reason})"

    def save(self, *args, **kwargs):
        # journal_entry is linked once, right after posting
        if self.pk and set(kwargs.get("update_fields") or []) != {"journal_entry"}:
            raise ValidationError("WasteLog records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("WasteLog records are immutable and cannot be deleted")
