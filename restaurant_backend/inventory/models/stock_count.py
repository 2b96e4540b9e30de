# inventory/models/stock_count.py

"""
STOCK COUNT (STOCK TAKE)

A physical count of a branch. Each line keeps the system quantity at count
time, the counted quantity and the cost snapshot used to value the difference.

net_value > 0 means shrinkage (stock missing), < 0 means overage.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from inventory.models.product import Product
from inventory.models.stock import QUANTITY_DIGITS


class StockCount(models.Model):
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="stock_counts",
    )
    counted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_counts",
    )
    counted_at = models.DateTimeField(default=timezone.now)

    notes = models.TextField(blank=True, default="")

    net_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_counts",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-counted_at", "-id"]

    def __str__(self):
        return f"Stock count #{self.pk} @ {self.branch_id}"


class StockCountLine(models.Model):
    stock_count = models.ForeignKey(
        StockCount,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_count_lines",
    )

    system_quantity = models.DecimalField(**QUANTITY_DIGITS)
    counted_quantity = models.DecimalField(
        validators=[MinValueValidator(Decimal("0"))],
        **QUANTITY_DIGITS,
    )
    variance = models.DecimalField(**QUANTITY_DIGITS)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0.0000"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["stock_count", "product"],
                name="uniq_stock_count_line_product",
            ),
        ]

    def __str__(self):
        return f"{self.product_id}: {self.system_quantity} -> {self.counted_quantity}"
