# branches/models.py

"""
BRANCH MODEL

A physical location: a central kitchen, a restaurant outlet or a warehouse.
Stock levels, shifts, sales reports and journal entries are scoped to branches.

When latitude/longitude are set, staff must clock in and out within
geo_radius metres of that point.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models


class Branch(models.Model):
    class BranchType(models.TextChoices):
        RESTAURANT = "RESTAURANT", "Restaurant"
        KITCHEN = "KITCHEN", "Central Kitchen"
        WAREHOUSE = "WAREHOUSE", "Warehouse"

    name = models.CharField(max_length=120, unique=True)
    code = models.CharField(max_length=20, unique=True)
    branch_type = models.CharField(
        max_length=20,
        choices=BranchType.choices,
        default=BranchType.RESTAURANT,
    )
    address = models.CharField(max_length=255, blank=True, default="")

    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    geo_radius = models.PositiveIntegerField(default=100, help_text="Clock-in radius in metres")
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Branch"
        verbose_name_plural = "Branches"

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        self.name = (self.name or "").strip()
        self.code = (self.code or "").strip().upper()
        if not self.name:
            raise ValidationError({"name": "Branch name is required"})
        if not self.code:
            raise ValidationError({"code": "Branch code is required"})
        if (self.latitude is None) != (self.longitude is None):
            raise ValidationError("latitude and longitude must be set together")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise ValidationError({"latitude": "latitude must be between -90 and 90"})
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise ValidationError({"longitude": "longitude must be between -180 and 180"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
