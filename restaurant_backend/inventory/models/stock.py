# inventory/models/stock.py

"""
======================================================
PATH: inventory/models/stock.py
======================================================
STOCK LEVELS + INVENTORY TRANSACTION LOG

InventoryLevel
- One row per (product, branch)
- quantity_on_hand is service-managed only (see services/stock_service.py)
- May go negative only through sales deductions (POS import)

InventoryTransaction
- Append-only (no updates, no deletes)
- quantity is the magnitude (> 0); delta carries the sign applied to the level
- unit_cost is a snapshot of product cost at movement time
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from inventory.models.product import Product

QUANTITY_DIGITS = dict(max_digits=14, decimal_places=3)


class InventoryLevel(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="inventory_levels",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.CASCADE,
        related_name="inventory_levels",
    )

    quantity_on_hand = models.DecimalField(default=Decimal("0"), **QUANTITY_DIGITS)

    reorder_point = models.DecimalField(
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        **QUANTITY_DIGITS,
    )
    par_level = models.DecimalField(
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        **QUANTITY_DIGITS,
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "branch"],
                name="uniq_inventory_level_product_branch",
            ),
        ]

    def __str__(self):
        return f"{self.product.name} @ {self.branch.code}: {self.quantity_on_hand}"

    @property
    def is_below_reorder_point(self) -> bool:
        return self.reorder_point > 0 and self.quantity_on_hand < self.reorder_point


class InventoryTransaction(models.Model):
    class Type(models.TextChoices):
        PURCHASE = "PURCHASE", "Purchase Receipt"
        SALE = "SALE", "Sale Deduction"
        WASTE = "WASTE", "Waste"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"
        COUNT = "COUNT", "Stock Count"
        PRODUCTION = "PRODUCTION", "Production"

    INBOUND_TYPES = {Type.PURCHASE, Type.TRANSFER_IN}
    OUTBOUND_TYPES = {Type.SALE, Type.WASTE, Type.TRANSFER_OUT}

    transaction_type = models.CharField(max_length=20, choices=Type.choices, db_index=True)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="inventory_transactions",
    )

    # The branch whose level this row changed.
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="inventory_transactions",
    )

    source_branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    dest_branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    quantity = models.DecimalField(
        validators=[MinValueValidator(Decimal("0.001"))],
        **QUANTITY_DIGITS,
    )
    delta = models.DecimalField(**QUANTITY_DIGITS)

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0.0000"),
        help_text="Unit cost snapshot at movement time (immutable).",
    )

    reference = models.CharField(max_length=100, blank=True, default="", db_index=True)
    notes = models.CharField(max_length=255, blank=True, default="")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_transactions",
    )

    occurred_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-occurred_at", "-id"]
        indexes = [
            models.Index(fields=["product", "occurred_at"], name="inv_txn_product_when_idx"),
            models.Index(fields=["branch", "occurred_at"], name="inv_txn_branch_when_idx"),
            models.Index(fields=["transaction_type", "occurred_at"], name="inv_txn_type_when_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.delta} x {self.product_id} @ {self.branch_id}"

    @property
    def total_cost(self) -> Decimal:
        return (self.unit_cost or Decimal("0")) * (self.quantity or Decimal("0"))

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")
        if self.delta is None or abs(self.delta) != self.quantity:
            raise ValidationError("delta must equal +/- quantity")

        if self.transaction_type in self.INBOUND_TYPES and self.delta < 0:
            raise ValidationError(f"{self.transaction_type} must increase stock")
        if self.transaction_type in self.OUTBOUND_TYPES and self.delta > 0:
            raise ValidationError(f"{self.transaction_type} must decrease stock")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryTransaction records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryTransaction records are immutable and cannot be deleted")
