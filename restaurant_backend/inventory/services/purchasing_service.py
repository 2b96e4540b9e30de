# inventory/services/purchasing_service.py

"""
======================================================
PATH: inventory/services/purchasing_service.py
======================================================
PURCHASE RECEIVING

create_purchase_invoice()  DRAFT invoice + items, no stock impact
receive_purchase_invoice() DRAFT -> RECEIVED:
  - stock added at the invoice branch (PURCHASE transactions)
  - product.cost moved to the weighted average:
        (q0 * c0 + q * c) / (q0 + q)
    where q0 is the on-hand total across all branches before receipt
  - Dr Inventory / Cr Accounts Payable for the invoice total

Receiving is atomic: a posting failure rolls back the stock change too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.services.money import q2
from accounting.services.posting import post_purchase_receipt
from inventory.models import InventoryTransaction, Product, PurchaseInvoice, PurchaseInvoiceItem
from inventory.services.exceptions import InventoryError
from inventory.services.stock_service import apply_stock_change, on_hand_total, to_positive_quantity

logger = logging.getLogger(__name__)

COST_PLACES = Decimal("0.0001")


def to_unit_cost(value) -> Decimal:
    try:
        cost = Decimal(str(value)).quantize(COST_PLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise InventoryError("unit_cost must be a number")
    if not cost.is_finite() or cost < 0:
        raise InventoryError("unit_cost must be zero or positive")
    return cost


@dataclass(frozen=True)
class ReceiveResult:
    invoice: PurchaseInvoice
    total_amount: Decimal
    journal_entry: object | None


def weighted_average_cost(*, on_hand: Decimal, current_cost: Decimal, quantity: Decimal, unit_cost: Decimal) -> Decimal:
    """
    Blend the incoming lot into the running average.

    Negative on-hand (oversold stock) counts as zero so the incoming cost
    is not distorted.
    """
    on_hand = max(on_hand or Decimal("0"), Decimal("0"))
    total_qty = on_hand + quantity
    if total_qty <= 0:
        return unit_cost.quantize(COST_PLACES)
    blended = (on_hand * (current_cost or Decimal("0")) + quantity * unit_cost) / total_qty
    return blended.quantize(COST_PLACES)


@transaction.atomic
def create_purchase_invoice(*, vendor, branch, invoice_number: str, items: list[dict], invoice_date=None, notes: str = "", user=None) -> PurchaseInvoice:
    """
    items: [{"product": Product, "quantity": ..., "unit_cost": ...}, ...]
    """
    if not items:
        raise InventoryError("At least one item is required")

    try:
        invoice = PurchaseInvoice.objects.create(
            vendor=vendor,
            branch=branch,
            invoice_number=invoice_number,
            invoice_date=invoice_date or timezone.localdate(),
            notes=notes or "",
            created_by=user,
        )
    except IntegrityError as exc:
        raise InventoryError(f"Invoice {invoice_number} already exists for {vendor}") from exc
    except ValidationError as exc:
        raise InventoryError("; ".join(exc.messages)) from exc

    for item in items:
        PurchaseInvoiceItem.objects.create(
            invoice=invoice,
            product=item["product"],
            quantity=to_positive_quantity(item.get("quantity")),
            unit_cost=to_unit_cost(item.get("unit_cost")),
        )

    return invoice


@transaction.atomic
def receive_purchase_invoice(invoice: PurchaseInvoice, *, user=None) -> ReceiveResult:
    locked = PurchaseInvoice.objects.select_for_update().select_related("vendor", "branch").get(pk=invoice.pk)

    if locked.status != PurchaseInvoice.Status.DRAFT:
        raise InventoryError(f"Invoice {locked.invoice_number} is already {locked.status}")

    items = list(locked.items.select_related("product"))
    if not items:
        raise InventoryError("Cannot receive an invoice without items")

    received_at = timezone.now()
    reference = f"PURCHASE:{locked.id}"

    for item in items:
        product = Product.objects.select_for_update().get(pk=item.product_id)

        new_cost = weighted_average_cost(
            on_hand=on_hand_total(product),
            current_cost=product.cost,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
        )

        apply_stock_change(
            product=product,
            branch=locked.branch,
            delta=item.quantity,
            transaction_type=InventoryTransaction.Type.PURCHASE,
            user=user,
            unit_cost=item.unit_cost,
            dest_branch=locked.branch,
            reference=reference,
            notes=f"Invoice {locked.invoice_number} ({locked.vendor})",
            occurred_at=received_at,
        )

        if new_cost != product.cost:
            product.cost = new_cost
            product.save(update_fields=["cost", "updated_at"])

    total = q2(sum((item.line_total for item in items), Decimal("0")))

    locked.status = PurchaseInvoice.Status.RECEIVED
    locked.received_by = user
    locked.received_at = received_at
    locked.journal_entry = post_purchase_receipt(locked, amount=total, user=user)
    # Bypass the received-lock in save(); this is the transition itself.
    PurchaseInvoice.objects.filter(pk=locked.pk).update(
        status=locked.status,
        received_by=user,
        received_at=received_at,
        journal_entry=locked.journal_entry,
    )

    logger.info(
        "Received purchase invoice %s (%s items, total %s) at branch %s",
        locked.invoice_number,
        len(items),
        total,
        locked.branch_id,
    )

    return ReceiveResult(invoice=locked, total_amount=total, journal_entry=locked.journal_entry)
