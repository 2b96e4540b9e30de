# inventory/models/purchase.py

"""
PURCHASE INVOICE MODELS

A supplier invoice for goods delivered to one branch.

Lifecycle:
- DRAFT: editable, no stock impact
- RECEIVED: stock added, product WAC updated, Dr Inventory / Cr AP posted.
  Received invoices are locked.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.services.money import q2
from inventory.models.product import Product
from inventory.models.stock import QUANTITY_DIGITS


class PurchaseInvoice(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        RECEIVED = "RECEIVED", "Received"

    vendor = models.ForeignKey(
        "accounting.Vendor",
        on_delete=models.PROTECT,
        related_name="purchase_invoices",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="purchase_invoices",
    )

    invoice_number = models.CharField(max_length=60)
    invoice_date = models.DateField(default=timezone.localdate)

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
    )

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_invoices_created",
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_invoices_received",
    )
    received_at = models.DateTimeField(null=True, blank=True)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_invoices",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["vendor", "invoice_number"],
                name="uniq_purchase_invoice_vendor_number",
            ),
        ]

    def __str__(self):
        return f"Invoice {self.invoice_number} ({self.vendor})"

    @property
    def total_amount(self) -> Decimal:
        return q2(sum((item.line_total for item in self.items.all()), Decimal("0")))

    def clean(self):
        self.invoice_number = (self.invoice_number or "").strip()
        if not self.invoice_number:
            raise ValidationError({"invoice_number": "Invoice number is required"})

    def save(self, *args, **kwargs):
        if self.pk:
            stored = PurchaseInvoice.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored == self.Status.RECEIVED:
                raise ValidationError("Received purchase invoices are locked")

        self.full_clean()
        return super().save(*args, **kwargs)


class PurchaseInvoiceItem(models.Model):
    invoice = models.ForeignKey(
        PurchaseInvoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_items",
    )

    quantity = models.DecimalField(
        validators=[MinValueValidator(Decimal("0.001"))],
        **QUANTITY_DIGITS,
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} x {self.product_id} @ {self.unit_cost}"

    @property
    def line_total(self) -> Decimal:
        return q2((self.quantity or Decimal("0")) * (self.unit_cost or Decimal("0")))
