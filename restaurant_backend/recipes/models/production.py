# recipes/models/production.py

"""
PRODUCTION BATCHES

A batch turns ingredient stock into a prepared product (sauce, dough,
marinated protein) at one branch. Ingredients leave stock and the output
enters stock as PRODUCTION movements; the output carries the consumed cost.

Batches are records of stock that already moved, so they are never edited.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class ProductionBatch(models.Model):
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="production_batches",
    )
    recipe = models.ForeignKey(
        "recipes.Recipe",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_batches",
    )
    output_product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="production_batches",
    )

    quantity_produced = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0.0000"))

    notes = models.CharField(max_length=255, blank=True, default="")

    produced_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_batches",
    )
    produced_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-produced_at", "-id"]
        verbose_name_plural = "Production batches"
        indexes = [
            models.Index(fields=["branch", "produced_at"], name="prod_branch_when_idx"),
        ]

    def __str__(self):
        return f"Batch {self.pk}: {self.quantity_produced} x {self.output_product_id}"

    @property
    def reference(self) -> str:
        return f"PRODUCTION:{self.pk}"


class ProductionIngredient(models.Model):
    batch = models.ForeignKey(
        ProductionBatch,
        on_delete=models.CASCADE,
        related_name="ingredients",
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="production_uses",
    )
    quantity_used = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    # WAC at the moment of production.
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0.0000"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["batch", "product"], name="uniq_production_ingredient"),
        ]

    def __str__(self):
        return f"{self.quantity_used} x {self.product_id}"

    @property
    def line_cost(self) -> Decimal:
        return (self.quantity_used or Decimal("0")) * (self.unit_cost or Decimal("0"))

    def clean(self):
        if self.batch_id and self.product_id and self.batch.output_product_id == self.product_id:
            raise ValidationError("A batch cannot consume its own output product")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
