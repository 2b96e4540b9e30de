# inventory/services/stock_count_service.py

"""
STOCK COUNT SERVICE

submit_stock_count() records a physical count for one branch:
- each line compares the counted quantity to the locked system quantity
- a non-zero difference becomes a COUNT transaction that sets on-hand to
  the counted figure
- the net value of the differences (at current product cost) is posted:
  shrinkage Dr Inventory Shrinkage / Cr Inventory, overage the reverse
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.money import q2
from accounting.services.posting import post_stock_count
from inventory.models import InventoryTransaction, StockCount, StockCountLine
from inventory.services.exceptions import InventoryError
from inventory.services.stock_service import apply_stock_change, lock_level, to_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockCountResult:
    stock_count: StockCount
    lines_counted: int
    lines_adjusted: int
    net_value: Decimal


@transaction.atomic
def submit_stock_count(*, branch, counts: list[dict], user=None, notes: str = "", counted_at=None) -> StockCountResult:
    """
    counts: [{"product": Product, "counted_quantity": ...}, ...]
    """
    if branch is None:
        raise InventoryError("branch is required")
    if not counts:
        raise InventoryError("At least one counted item is required")

    seen = set()
    for row in counts:
        product_id = row["product"].pk
        if product_id in seen:
            raise InventoryError(f"Product {row['product'].name} is counted more than once")
        seen.add(product_id)

    counted_at = counted_at or timezone.now()
    stock_count = StockCount.objects.create(
        branch=branch,
        counted_by=user,
        counted_at=counted_at,
        notes=notes or "",
    )
    reference = f"COUNT:{stock_count.id}"

    net_value = Decimal("0")
    adjusted = 0

    for row in counts:
        product = row["product"]
        counted = to_quantity(row.get("counted_quantity"), field="counted_quantity")
        if counted < 0:
            raise InventoryError("counted_quantity cannot be negative")

        system_qty = lock_level(product, branch).quantity_on_hand
        variance = counted - system_qty

        StockCountLine.objects.create(
            stock_count=stock_count,
            product=product,
            system_quantity=system_qty,
            counted_quantity=counted,
            variance=variance,
            unit_cost=product.cost,
        )

        if variance == 0:
            continue

        apply_stock_change(
            product=product,
            branch=branch,
            delta=variance,
            transaction_type=InventoryTransaction.Type.COUNT,
            user=user,
            reference=reference,
            notes=f"Stock take variance {'+' if variance > 0 else ''}{variance}",
            occurred_at=counted_at,
        )
        adjusted += 1
        # missing stock is positive value (shrinkage)
        net_value -= variance * product.cost

    net_value = q2(net_value)
    stock_count.net_value = net_value
    stock_count.journal_entry = post_stock_count(stock_count, net_value=net_value, user=user)
    stock_count.save(update_fields=["net_value", "journal_entry"])

    logger.info(
        "Stock count #%s at branch %s: %s lines, %s adjusted, net value %s",
        stock_count.id,
        branch.pk,
        len(counts),
        adjusted,
        net_value,
    )

    return StockCountResult(
        stock_count=stock_count,
        lines_counted=len(counts),
        lines_adjusted=adjusted,
        net_value=net_value,
    )
