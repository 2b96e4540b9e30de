# recipes/models/pos.py

"""
POS LOOKUP TABLES

PosMenuItem     POS string -> menu selling price (expected revenue)
ProductMapping  POS string -> inventory product + quantity deducted per unit sold

POS strings are matched exactly as they appear in the POS export, including
modifier names ("Add Cheese").
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class PosMenuItem(models.Model):
    pos_string = models.CharField(max_length=200, unique=True)
    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    recipe = models.ForeignKey(
        "recipes.Recipe",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="menu_items",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["pos_string"]
        verbose_name = "POS Menu Item"

    def __str__(self):
        return f"{self.pos_string} @ {self.selling_price}"

    def clean(self):
        self.pos_string = (self.pos_string or "").strip()
        if not self.pos_string:
            raise ValidationError({"pos_string": "pos_string is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class ProductMapping(models.Model):
    pos_string = models.CharField(max_length=200, unique=True)
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.CASCADE,
        related_name="pos_mappings",
    )
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Product quantity deducted per unit sold",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["pos_string"]

    def __str__(self):
        return f"{self.pos_string} -> {self.product_id} x {self.quantity}"

    def clean(self):
        self.pos_string = (self.pos_string or "").strip()
        if not self.pos_string:
            raise ValidationError({"pos_string": "pos_string is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
