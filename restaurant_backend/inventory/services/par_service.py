# inventory/services/par_service.py

"""
PAR LEVEL SUGGESTIONS

Levels below their reorder point, with a suggested order quantity that tops
the branch back up to par (or to twice the reorder point when no par is set).
Out-of-stock lines are HIGH priority.
"""

from __future__ import annotations

from decimal import Decimal

from accounting.services.money import q2, to_major_number
from inventory.models import InventoryLevel


def par_suggestions(*, branch_ids: list[int] | None = None) -> dict:
    qs = InventoryLevel.objects.select_related("product", "branch").filter(
        product__is_active=True,
        reorder_point__gt=0,
    )
    if branch_ids is not None:
        qs = qs.filter(branch_id__in=branch_ids)

    suggestions = []
    for level in qs:
        on_hand = level.quantity_on_hand
        if on_hand >= level.reorder_point:
            continue

        target = level.par_level if level.par_level > 0 else level.reorder_point * 2
        suggested = max(target - on_hand, Decimal("0"))
        is_critical = on_hand <= 0
        estimated = q2(suggested * level.product.cost)

        suggestions.append(
            {
                "product_id": level.product_id,
                "sku": level.product.sku,
                "name": level.product.name,
                "unit": level.product.unit,
                "branch_id": level.branch_id,
                "branch_name": level.branch.name,
                "quantity_on_hand": float(on_hand),
                "reorder_point": float(level.reorder_point),
                "par_level": float(level.par_level),
                "deficit": float(level.reorder_point - on_hand),
                "suggested_order_quantity": float(suggested),
                "estimated_cost": to_major_number(estimated),
                "is_critical": is_critical,
                "priority": "HIGH" if is_critical else "MEDIUM",
                "_estimated": estimated,
            }
        )

    suggestions.sort(key=lambda s: (not s["is_critical"], -s["deficit"]))

    total_cost = sum((s.pop("_estimated") for s in suggestions), Decimal("0"))

    return {
        "summary": {
            "total_suggestions": len(suggestions),
            "critical_items": sum(1 for s in suggestions if s["is_critical"]),
            "total_estimated_cost": to_major_number(total_cost),
        },
        "suggestions": suggestions,
    }
