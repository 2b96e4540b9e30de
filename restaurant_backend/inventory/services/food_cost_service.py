# inventory/services/food_cost_service.py

"""
FOOD COST ANALYTICS

food_cost_analytics() compares what the kitchen spent with what it sold:

    purchase_cost    = sum(quantity * unit_cost) of PURCHASE movements
    waste_cost       = sum(WasteLog.cost_impact)
    sales            = net revenue of SUCCESS / THEORETICAL_ONLY sales reports
    food_cost_pct    = (purchase_cost + waste_cost) / sales * 100
    variance         = food_cost_pct - target (settings.FOOD_COST_TARGET_PCT)

Percentages are None when the period has no sales. The daily trend uses the
same formula per local calendar day.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.apps import apps
from django.conf import settings
from django.utils import timezone

from accounting.services.money import end_of_day_exclusive, q2, start_of_day, to_major_number
from inventory.models import InventoryTransaction, WasteLog
from inventory.services.exceptions import InventoryError

ZERO = Decimal("0")


def _pct(cost: Decimal, sales: Decimal) -> Decimal | None:
    if sales <= 0:
        return None
    return q2(cost / sales * 100)


def _number(value: Decimal | None) -> float | None:
    return None if value is None else to_major_number(value)


def food_cost_analytics(
    *,
    start_date: date | None,
    end_date: date | None,
    branch_ids: list[int] | None = None,
    target_pct=None,
) -> dict:
    if not start_date or not end_date:
        raise InventoryError("start_date and end_date are required")
    if start_date > end_date:
        raise InventoryError("start_date cannot be after end_date")

    target = q2(settings.FOOD_COST_TARGET_PCT if target_pct is None else target_pct)
    window = {
        "occurred_at__gte": start_of_day(start_date),
        "occurred_at__lt": end_of_day_exclusive(end_date),
    }

    purchases = InventoryTransaction.objects.filter(transaction_type=InventoryTransaction.Type.PURCHASE, **window)
    waste = WasteLog.objects.filter(**window)

    SalesReport = apps.get_model("recipes", "SalesReport")
    reports = SalesReport.objects.filter(
        status__in=[SalesReport.Status.SUCCESS, SalesReport.Status.THEORETICAL_ONLY],
        report_date__gte=start_date,
        report_date__lte=end_date,
    )

    if branch_ids is not None:
        purchases = purchases.filter(branch_id__in=branch_ids)
        waste = waste.filter(branch_id__in=branch_ids)
        reports = reports.filter(branch_id__in=branch_ids)

    daily: dict[str, dict] = {}

    def _day(key: str) -> dict:
        return daily.setdefault(key, {"date": key, "purchase_cost": ZERO, "waste_cost": ZERO, "sales": ZERO})

    purchase_cost = ZERO
    for occurred_at, quantity, unit_cost in purchases.values_list("occurred_at", "quantity", "unit_cost"):
        cost = quantity * unit_cost
        purchase_cost += cost
        _day(timezone.localtime(occurred_at).date().isoformat())["purchase_cost"] += cost

    waste_cost = ZERO
    for occurred_at, cost in waste.values_list("occurred_at", "cost_impact"):
        waste_cost += cost
        _day(timezone.localtime(occurred_at).date().isoformat())["waste_cost"] += cost

    sales = ZERO
    for report_date, net_revenue in reports.values_list("report_date", "net_revenue"):
        sales += net_revenue
        _day(report_date.isoformat())["sales"] += net_revenue

    total_cost = q2(purchase_cost) + q2(waste_cost)
    food_cost_pct = _pct(total_cost, sales)

    trend = []
    for row in sorted(daily.values(), key=lambda d: d["date"]):
        day_cost = row["purchase_cost"] + row["waste_cost"]
        trend.append(
            {
                "date": row["date"],
                "purchase_cost": to_major_number(row["purchase_cost"]),
                "waste_cost": to_major_number(row["waste_cost"]),
                "sales": to_major_number(row["sales"]),
                "food_cost_pct": _number(_pct(day_cost, row["sales"])),
            }
        )

    return {
        "period": {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        "summary": {
            "total_purchase_cost": to_major_number(purchase_cost),
            "total_waste_cost": to_major_number(waste_cost),
            "total_cost": to_major_number(total_cost),
            "total_sales": to_major_number(sales),
            "food_cost_pct": _number(food_cost_pct),
            "target_food_cost_pct": to_major_number(target),
            "variance": _number(None if food_cost_pct is None else food_cost_pct - target),
        },
        "daily_trend": trend,
    }
