# recipes/models/sales_report.py

"""
SALES REPORT

One executed POS sales import for one branch and business day.

- net_revenue: revenue declared by the POS file
- expected_revenue: revenue implied by PosMenuItem prices
- total_cogs: theoretical COGS (deducted quantities x product WAC)

SUCCESS and THEORETICAL_ONLY reports feed variance reconciliation.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models


class SalesReport(models.Model):
    class Status(models.TextChoices):
        SUCCESS = "SUCCESS", "Success"
        THEORETICAL_ONLY = "THEORETICAL_ONLY", "Theoretical Only"
        FAILED = "FAILED", "Failed"

    branch = models.ForeignKey(
        "branches.Branch",
        on_delete=models.PROTECT,
        related_name="sales_reports",
    )

    file_name = models.CharField(max_length=255, blank=True, default="")
    report_date = models.DateField(db_index=True)

    net_revenue = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    expected_revenue = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    revenue_variance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_cogs = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    row_count = models.PositiveIntegerField(default=0)
    audit = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SUCCESS,
        db_index=True,
    )

    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales_reports",
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-report_date", "-uploaded_at"]
        indexes = [
            models.Index(fields=["branch", "report_date"], name="rcp_sales_branch_date_idx"),
        ]

    def __str__(self):
        return f"Sales {self.report_date} @ {self.branch_id} ({self.status})"
