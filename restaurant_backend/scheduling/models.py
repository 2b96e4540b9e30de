# scheduling/models.py

"""
======================================================
PATH: scheduling/models.py
======================================================
SHIFT + TIME ENTRY MODELS

Shift: one scheduled block of work for one staff member at one branch on one day.
Shifts never cross midnight: end_time must be after start_time.
Overlap checks live in scheduling/services/shift_service.py because they
need row locks and the caller's batch.

TimeEntry: one clock-in/clock-out pair actually worked. A user has at most
one open entry (clock_out_at is null); total_hours is set on clock-out.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class Shift(models.Model):
    class Status(models.TextChoices):
        SCHEDULED = "SCHEDULED", "Scheduled"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="shifts",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="shifts",
    )

    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()

    # Station worked, e.g. "Grill" or "Cashier"; not the account role.
    role = models.CharField(max_length=50)
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED,
        db_index=True,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["user", "date"], name="shift_user_date_idx"),
            models.Index(fields=["branch", "date"], name="shift_branch_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="chk_shift_end_after_start",
            ),
        ]

    def __str__(self):
        return f"{self.user} {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def duration_hours(self) -> Decimal:
        start = datetime.combine(self.date, self.start_time)
        end = datetime.combine(self.date, self.end_time)
        return (Decimal((end - start).total_seconds()) / Decimal(3600)).quantize(Decimal("0.01"))

    def overlaps(self, start_time, end_time) -> bool:
        return start_time < self.end_time and end_time > self.start_time

    def clean(self):
        self.role = (self.role or "").strip()
        if not self.role:
            raise ValidationError({"role": "role is required"})
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({"end_time": "end_time must be after start_time"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class TimeEntry(models.Model):
    class Source(models.TextChoices):
        APP = "app", "Mobile App"
        KIOSK = "kiosk", "Branch Kiosk"
        MANUAL = "manual", "Manual Entry"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="time_entries",
    )
    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="time_entries",
    )

    clock_in_at = models.DateTimeField(db_index=True)
    clock_in_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    clock_in_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    clock_in_source = models.CharField(max_length=10, choices=Source.choices, default=Source.APP)

    clock_out_at = models.DateTimeField(null=True, blank=True)
    clock_out_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    clock_out_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    clock_out_source = models.CharField(max_length=10, choices=Source.choices, blank=True, default="")

    total_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-clock_in_at"]
        verbose_name_plural = "Time entries"
        indexes = [
            models.Index(fields=["user", "clock_in_at"], name="time_user_clock_in_idx"),
            models.Index(fields=["branch", "clock_in_at"], name="time_branch_clock_in_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(clock_out_at__isnull=True),
                name="uniq_time_entry_open_per_user",
            ),
            models.CheckConstraint(
                condition=Q(clock_out_at__isnull=True) | Q(clock_out_at__gte=F("clock_in_at")),
                name="chk_time_entry_out_after_in",
            ),
        ]

    def __str__(self):
        return f"{self.user} @ {self.branch_id} {self.clock_in_at:%Y-%m-%d %H:%M}"

    @property
    def is_open(self) -> bool:
        return self.clock_out_at is None

    def clean(self):
        if self.clock_out_at and self.clock_in_at and self.clock_out_at < self.clock_in_at:
            raise ValidationError({"clock_out_at": "clock_out_at must be after clock_in_at"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
