# accounting/models/mapping.py

"""
ACCOUNTING MAPPING

Binds a business event key (e.g. WASTE_EXPENSE, SALARIES_PAYABLE) to the
account that event posts to. Rows are optional: the resolver falls back to
the default code table when a key has no mapping for the active chart.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts


class AccountingMapping(models.Model):
    chart = models.ForeignKey(
        ChartOfAccounts,
        on_delete=models.CASCADE,
        related_name="mappings",
    )

    event_key = models.CharField(max_length=50)

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="mappings",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["event_key"]
        constraints = [
            models.UniqueConstraint(
                fields=["chart", "event_key"],
                name="uniq_mapping_chart_event_key",
            ),
        ]

    def __str__(self):
        return f"{self.event_key} -> {self.account.code}"

    def clean(self):
        self.event_key = (self.event_key or "").strip().upper()
        if not self.event_key:
            raise ValidationError({"event_key": "event_key is required"})
        if self.account_id and self.chart_id and self.account.chart_id != self.chart_id:
            raise ValidationError({"account": "Mapped account must belong to the same chart"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
