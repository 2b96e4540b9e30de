# recipes/services/production.py

"""
======================================================
PATH: recipes/services/production.py
======================================================
PRODUCTION

record_production() consumes ingredient stock and adds the output product
at one branch, all as PRODUCTION movements in one transaction.

- ingredients come from the request, or from the recipe scaled by
  quantity_produced / serving_size (one recipe yields serving_size units)
- ingredient stock may not go negative
- batch cost = sum(quantity_used * ingredient WAC); the output product's
  WAC is blended with the batch unit cost like a purchase receipt
- nothing is posted to the ledger: value moves between products that all
  sit on the Inventory account
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.money import q2
from inventory.models import InventoryTransaction, Product
from inventory.services.exceptions import InventoryError
from inventory.services.purchasing_service import COST_PLACES, weighted_average_cost
from inventory.services.stock_service import (
    QTY_PLACES,
    apply_stock_change,
    on_hand_total,
    to_positive_quantity,
)
from recipes.models import ProductionBatch, ProductionIngredient

logger = logging.getLogger(__name__)


class ProductionError(InventoryError):
    pass


def _ingredients_from_recipe(recipe, quantity_produced: Decimal) -> list[tuple[Product, Decimal]]:
    factor = quantity_produced / Decimal(recipe.serving_size)
    rows = []
    for ing in recipe.ingredients.select_related("product"):
        qty = (ing.quantity * factor).quantize(QTY_PLACES)
        if qty > 0:
            rows.append((ing.product, qty))
    return rows


def _merge(rows) -> dict[int, Decimal]:
    merged: dict[int, Decimal] = {}
    for product, quantity in rows:
        merged[product.pk] = merged.get(product.pk, Decimal("0")) + quantity
    return merged


@transaction.atomic
def record_production(
    *,
    branch,
    output_product: Product,
    quantity_produced,
    ingredients: list[dict] | None = None,
    recipe=None,
    notes: str = "",
    user=None,
    produced_at=None,
) -> ProductionBatch:
    """
    `ingredients` items are {"product": Product, "quantity": ...}. When it is
    empty the recipe's ingredient list is used.
    """
    if branch is None or not branch.is_active:
        raise ProductionError("Branch not found or inactive")
    if output_product is None or not output_product.is_active:
        raise ProductionError("Output product not found or inactive")

    qty = to_positive_quantity(quantity_produced, field="quantity_produced")

    if ingredients:
        rows = [
            (item["product"], to_positive_quantity(item.get("quantity"), field="ingredient quantity"))
            for item in ingredients
        ]
    elif recipe is not None:
        rows = _ingredients_from_recipe(recipe, qty)
    else:
        raise ProductionError("Provide ingredients or a recipe")

    if not rows:
        raise ProductionError("Production needs at least one ingredient")

    consumed = _merge(rows)
    if output_product.pk in consumed:
        raise ProductionError(f"{output_product.name} cannot be an ingredient of its own batch")

    produced_at = produced_at or timezone.now()
    batch = ProductionBatch.objects.create(
        branch=branch,
        recipe=recipe,
        output_product=output_product,
        quantity_produced=qty,
        notes=(notes or "")[:255],
        produced_by=user,
        produced_at=produced_at,
    )

    total = Decimal("0")
    # Lock in pk order so concurrent batches sharing ingredients do not deadlock.
    for product in Product.objects.select_for_update().filter(pk__in=list(consumed)).order_by("pk"):
        used = consumed[product.pk]
        apply_stock_change(
            product=product,
            branch=branch,
            delta=-used,
            transaction_type=InventoryTransaction.Type.PRODUCTION,
            user=user,
            unit_cost=product.cost,
            reference=batch.reference,
            notes=f"Used for {output_product.name}",
            occurred_at=produced_at,
        )
        ProductionIngredient.objects.create(
            batch=batch,
            product=product,
            quantity_used=used,
            unit_cost=product.cost,
        )
        total += used * product.cost

    unit_cost = (total / qty).quantize(COST_PLACES)

    output = Product.objects.select_for_update().get(pk=output_product.pk)
    new_cost = weighted_average_cost(
        on_hand=on_hand_total(output),
        current_cost=output.cost,
        quantity=qty,
        unit_cost=unit_cost,
    )
    apply_stock_change(
        product=output,
        branch=branch,
        delta=qty,
        transaction_type=InventoryTransaction.Type.PRODUCTION,
        user=user,
        unit_cost=unit_cost,
        reference=batch.reference,
        notes=f"Batch {batch.pk}",
        occurred_at=produced_at,
    )
    if new_cost != output.cost:
        output.cost = new_cost
        output.save(update_fields=["cost", "updated_at"])

    ProductionBatch.objects.filter(pk=batch.pk).update(total_cost=q2(total), unit_cost=unit_cost)
    batch.total_cost = q2(total)
    batch.unit_cost = unit_cost

    logger.info(
        "Production batch=%s branch=%s output=%s qty=%s cost=%s",
        batch.pk,
        branch.pk,
        output.sku,
        qty,
        batch.total_cost,
    )
    return batch
