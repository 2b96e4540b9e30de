# inventory/services/transfer_service.py

"""
======================================================
PATH: inventory/services/transfer_service.py
======================================================
STOCK TRANSFERS

create_transfer()   REQUESTED, no stock impact
send_transfer()     REQUESTED -> IN_TRANSIT; stock leaves the source branch
                    (fails whole when any line is short), cost snapshot taken
receive_transfer()  IN_TRANSIT -> RECEIVED; stock lands at the destination,
                    inventory value moved between branch slices in the ledger
cancel_transfer()   REQUESTED -> CANCELLED
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.posting import post_stock_transfer
from inventory.models import InventoryTransaction, TransferItem, TransferRequest
from inventory.services.exceptions import InventoryError
from inventory.services.stock_service import apply_stock_change, to_positive_quantity

logger = logging.getLogger(__name__)


def _lock(transfer: TransferRequest) -> TransferRequest:
    return TransferRequest.objects.select_for_update().select_related("from_branch", "to_branch").get(pk=transfer.pk)


def _require_status(transfer: TransferRequest, expected: str) -> None:
    if transfer.status != expected:
        raise InventoryError(f"Transfer #{transfer.id} is already {transfer.status}")


@transaction.atomic
def create_transfer(*, from_branch, to_branch, items: list[dict], user=None, notes: str = "") -> TransferRequest:
    """
    items: [{"product": Product, "quantity": ...}, ...]
    """
    if from_branch is None or to_branch is None:
        raise InventoryError("Both source and destination branches are required")
    if from_branch.pk == to_branch.pk:
        raise InventoryError("Source and destination branches must be different")
    if not items:
        raise InventoryError("At least one item is required")

    transfer = TransferRequest.objects.create(
        from_branch=from_branch,
        to_branch=to_branch,
        notes=notes or "",
        requested_by=user,
    )
    TransferItem.objects.bulk_create(
        [
            TransferItem(
                transfer=transfer,
                product=item["product"],
                quantity=to_positive_quantity(item.get("quantity")),
            )
            for item in items
        ]
    )
    return transfer


@transaction.atomic
def send_transfer(transfer: TransferRequest, *, user=None) -> TransferRequest:
    locked = _lock(transfer)
    _require_status(locked, TransferRequest.Status.REQUESTED)

    sent_at = timezone.now()
    reference = f"TRANSFER:{locked.id}"

    for item in locked.items.select_related("product"):
        apply_stock_change(
            product=item.product,
            branch=locked.from_branch,
            delta=-item.quantity,
            transaction_type=InventoryTransaction.Type.TRANSFER_OUT,
            user=user,
            source_branch=locked.from_branch,
            dest_branch=locked.to_branch,
            reference=reference,
            notes=f"Transfer out for request #{locked.id}",
            occurred_at=sent_at,
        )
        item.unit_cost = item.product.cost
        item.save(update_fields=["unit_cost"])

    locked.status = TransferRequest.Status.IN_TRANSIT
    locked.sent_by = user
    locked.sent_at = sent_at
    locked.save()
    return locked


@transaction.atomic
def receive_transfer(transfer: TransferRequest, *, user=None) -> TransferRequest:
    locked = _lock(transfer)
    _require_status(locked, TransferRequest.Status.IN_TRANSIT)

    received_at = timezone.now()
    reference = f"TRANSFER:{locked.id}"
    items = list(locked.items.select_related("product"))

    for item in items:
        apply_stock_change(
            product=item.product,
            branch=locked.to_branch,
            delta=item.quantity,
            transaction_type=InventoryTransaction.Type.TRANSFER_IN,
            user=user,
            unit_cost=item.unit_cost,
            source_branch=locked.from_branch,
            dest_branch=locked.to_branch,
            reference=reference,
            notes=f"Transfer in for request #{locked.id}",
            occurred_at=received_at,
        )

    locked.status = TransferRequest.Status.RECEIVED
    locked.received_by = user
    locked.received_at = received_at

    value = sum((item.line_value for item in items), Decimal("0"))
    locked.journal_entry = post_stock_transfer(locked, amount=value, user=user)
    locked.save()

    logger.info(
        "Received transfer #%s (%s -> %s), %s lines, value %s",
        locked.id,
        locked.from_branch.code,
        locked.to_branch.code,
        len(items),
        value,
    )
    return locked


@transaction.atomic
def cancel_transfer(transfer: TransferRequest, *, user=None) -> TransferRequest:
    locked = _lock(transfer)
    _require_status(locked, TransferRequest.Status.REQUESTED)

    locked.status = TransferRequest.Status.CANCELLED
    locked.save()
    logger.info("Transfer #%s cancelled by %s", locked.id, getattr(user, "pk", None))
    return locked
