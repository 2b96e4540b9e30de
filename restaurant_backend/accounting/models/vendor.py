# accounting/models/vendor.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models


class Vendor(models.Model):
    """
    Supplier the restaurant buys stock and services from.

    Vendors are referenced by purchase invoices, so they are deactivated
    rather than deleted once used.
    """

    name = models.CharField(max_length=150, unique=True)
    contact_name = models.CharField(max_length=150, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    tax_id = models.CharField(max_length=50, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Vendor name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
