# inventory/services/stock_service.py

"""
======================================================
PATH: inventory/services/stock_service.py
======================================================
STOCK SERVICE

The only place InventoryLevel.quantity_on_hand changes.

Rules:
- delta must be non-zero
- the level row is locked (select_for_update) and created on first use
- a change may not take on-hand below zero unless allow_negative=True
  (sales deductions from POS imports)
- every change writes one immutable InventoryTransaction
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryLevel, InventoryTransaction, Product
from inventory.services.exceptions import InsufficientStockError, InventoryError

QTY_PLACES = Decimal("0.001")


@dataclass(frozen=True)
class StockChangeResult:
    level: InventoryLevel
    transaction: InventoryTransaction
    quantity_before: Decimal
    quantity_after: Decimal


def to_quantity(value, *, field: str = "quantity") -> Decimal:
    if value is None or value == "":
        raise InventoryError(f"{field} is required")
    if isinstance(value, bool):
        raise InventoryError(f"{field} must be a number")
    try:
        qty = Decimal(str(value)).quantize(QTY_PLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise InventoryError(f"{field} must be a number")
    if not qty.is_finite():
        raise InventoryError(f"{field} must be a number")
    return qty


def to_positive_quantity(value, *, field: str = "quantity") -> Decimal:
    qty = to_quantity(value, field=field)
    if qty <= 0:
        raise InventoryError(f"{field} must be greater than zero")
    return qty


def lock_level(product: Product, branch) -> InventoryLevel:
    level, _ = InventoryLevel.objects.select_for_update().get_or_create(
        product=product,
        branch=branch,
    )
    return level


def on_hand_total(product: Product) -> Decimal:
    """Quantity on hand across every branch."""
    total = Decimal("0")
    for qty in InventoryLevel.objects.filter(product=product).values_list("quantity_on_hand", flat=True):
        total += qty
    return total


@transaction.atomic
def apply_stock_change(
    *,
    product: Product,
    branch,
    delta,
    transaction_type: str,
    user=None,
    allow_negative: bool = False,
    unit_cost: Decimal | None = None,
    source_branch=None,
    dest_branch=None,
    reference: str = "",
    notes: str = "",
    occurred_at=None,
) -> StockChangeResult:
    if product is None:
        raise InventoryError("product is required")
    if branch is None:
        raise InventoryError("branch is required")

    delta = to_quantity(delta, field="delta")
    if delta == 0:
        raise InventoryError("delta cannot be 0")

    level = lock_level(product, branch)
    before = level.quantity_on_hand or Decimal("0")
    after = before + delta

    if after < 0 and not allow_negative:
        raise InsufficientStockError(product, branch, before, abs(delta))

    level.quantity_on_hand = after
    level.save(update_fields=["quantity_on_hand", "updated_at"])

    movement = InventoryTransaction.objects.create(
        transaction_type=transaction_type,
        product=product,
        branch=branch,
        source_branch=source_branch,
        dest_branch=dest_branch,
        quantity=abs(delta),
        delta=delta,
        unit_cost=product.cost if unit_cost is None else unit_cost,
        reference=reference or "",
        notes=(notes or "")[:255],
        user=user,
        occurred_at=occurred_at or timezone.now(),
    )

    return StockChangeResult(
        level=level,
        transaction=movement,
        quantity_before=before,
        quantity_after=after,
    )
