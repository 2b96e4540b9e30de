# inventory/models/product.py

"""
PRODUCT MODEL

A stock-keeping ingredient or consumable.

`cost` is the weighted average unit cost across every branch. It is
maintained by purchase receiving and read by waste, counts, transfers,
recipe costing and sales COGS.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Product(models.Model):
    class Category(models.TextChoices):
        FOOD = "FOOD", "Food"
        BEVERAGE = "BEVERAGE", "Beverage"
        PACKAGING = "PACKAGING", "Packaging"
        OTHER = "OTHER", "Other"

    sku = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=20, default="unit", help_text="kg, l, pcs ...")

    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.FOOD,
        db_index=True,
    )

    cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0.0000"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Weighted average unit cost",
    )

    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "is_active"], name="inv_product_category_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip().upper()
        self.name = (self.name or "").strip()
        self.unit = (self.unit or "").strip() or "unit"

        if not self.sku:
            raise ValidationError({"sku": "SKU is required"})
        if not self.name:
            raise ValidationError({"name": "Product name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
