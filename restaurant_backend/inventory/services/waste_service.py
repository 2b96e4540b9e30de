# inventory/services/waste_service.py

"""
WASTE SERVICE

record_waste()  decrement stock, write WasteLog, post Dr Waste (or Staff
                Meal) expense / Cr Inventory at cost
waste_summary() totals by reason, top products by cost and a daily trend
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.money import end_of_day_exclusive, q2, start_of_day, to_major_number
from accounting.services.posting import post_waste
from inventory.models import InventoryTransaction, Product, WasteLog
from inventory.services.exceptions import InventoryError
from inventory.services.stock_service import apply_stock_change, to_positive_quantity

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 10


@transaction.atomic
def record_waste(*, product: Product, branch, quantity, reason: str, user=None, notes: str = "", occurred_at=None) -> WasteLog:
    if reason not in WasteLog.Reason.values:
        raise InventoryError(f"Invalid waste reason: {reason}")

    qty = to_positive_quantity(quantity)
    product = Product.objects.select_for_update().get(pk=product.pk)
    occurred_at = occurred_at or timezone.now()

    cost_impact = q2(product.cost * qty)
    if cost_impact <= 0:
        logger.warning("Waste recorded for %s with zero cost; nothing will be posted", product.sku)

    log = WasteLog.objects.create(
        product=product,
        branch=branch,
        quantity=qty,
        reason=reason,
        cost_impact=cost_impact,
        notes=notes or "",
        user=user,
        occurred_at=occurred_at,
    )

    apply_stock_change(
        product=product,
        branch=branch,
        delta=-qty,
        transaction_type=InventoryTransaction.Type.WASTE,
        user=user,
        reference=f"WASTE:{log.id}",
        notes=f"{log.get_reason_display()} {notes or ''}".strip(),
        occurred_at=occurred_at,
    )

    entry = post_waste(log, user=user)
    if entry is not None:
        log.journal_entry = entry
        log.save(update_fields=["journal_entry"])

    return log


def waste_summary(*, start_date: date | None = None, end_date: date | None = None, branch_ids: list[int] | None = None) -> dict:
    qs = WasteLog.objects.select_related("product")
    if start_date:
        qs = qs.filter(occurred_at__gte=start_of_day(start_date))
    if end_date:
        qs = qs.filter(occurred_at__lt=end_of_day_exclusive(end_date))
    if branch_ids is not None:
        qs = qs.filter(branch_id__in=branch_ids)

    total_cost = Decimal("0")
    total_quantity = Decimal("0")
    count = 0
    by_reason: dict[str, dict] = {}
    by_product: dict[int, dict] = {}
    daily: dict[str, dict] = {}

    for log in qs:
        count += 1
        total_cost += log.cost_impact
        total_quantity += log.quantity

        r = by_reason.setdefault(log.reason, {"count": 0, "cost": Decimal("0"), "quantity": Decimal("0")})
        r["count"] += 1
        r["cost"] += log.cost_impact
        r["quantity"] += log.quantity

        p = by_product.setdefault(
            log.product_id,
            {
                "product_id": log.product_id,
                "product_name": log.product.name,
                "count": 0,
                "cost": Decimal("0"),
                "quantity": Decimal("0"),
            },
        )
        p["count"] += 1
        p["cost"] += log.cost_impact
        p["quantity"] += log.quantity

        day = timezone.localtime(log.occurred_at).date().isoformat()
        d = daily.setdefault(day, {"date": day, "cost": Decimal("0"), "quantity": Decimal("0")})
        d["cost"] += log.cost_impact
        d["quantity"] += log.quantity

    def _out(row: dict) -> dict:
        return {**row, "cost": to_major_number(row["cost"]), "quantity": float(row["quantity"])}

    top_products = sorted(by_product.values(), key=lambda p: p["cost"], reverse=True)[:TOP_PRODUCTS_LIMIT]

    return {
        "summary": {
            "total_cost": to_major_number(total_cost),
            "total_quantity": float(total_quantity),
            "total_items": count,
        },
        "by_reason": {reason: _out(row) for reason, row in by_reason.items()},
        "top_products": [_out(p) for p in top_products],
        "daily_trend": [_out(d) for d in sorted(daily.values(), key=lambda d: d["date"])],
    }
