# recipes/services/sales_import.py

"""
======================================================
PATH: recipes/services/sales_import.py
======================================================
POS SALES IMPORT

analyze_sales_file() parses an uploaded POS export and computes, without
writing anything:
- declared revenue (order_value / total column)
- expected revenue from PosMenuItem prices
      item price x item qty + modifier price x item qty x modifier qty
- an audit line per distinct POS string: OK / MISSING_RECIPE / ZERO_COST
- product deductions aggregated from ProductMapping
- theoretical COGS = deducted qty x product WAC

execute_sales_import() persists an analysis for one branch atomically: a
SalesReport plus one SALE transaction per product. Sales may drive stock
negative (the POS is the source of truth for what was sold).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from accounting.services.money import as_posted_at, q2, to_major_number
from inventory.models import InventoryTransaction, Product
from inventory.services.stock_service import apply_stock_change
from recipes.models import PosMenuItem, ProductMapping, SalesReport
from recipes.services.file_parser import parse_upload
from recipes.services.order_parser import parse_order_line

logger = logging.getLogger(__name__)

AUDIT_OK = "OK"
AUDIT_MISSING_RECIPE = "MISSING_RECIPE"
AUDIT_ZERO_COST = "ZERO_COST"

ORDER_ITEMS_COLUMN = "order_items"
REVENUE_COLUMNS = ("order_value", "total")
DATE_COLUMNS = ("date", "business_date", "created_at")

_MONEY_JUNK = re.compile(r"[^0-9.\-]+")


class SalesImportError(ValueError):
    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []


@dataclass
class SalesAnalysis:
    report_date: date
    date_source: str
    row_count: int = 0
    declared_revenue: Decimal = Decimal("0.00")
    expected_revenue: Decimal = Decimal("0.00")
    total_cogs: Decimal = Decimal("0.00")
    audit: list[dict] = field(default_factory=list)
    deductions: dict[int, Decimal] = field(default_factory=dict)
    failed_rows: list[dict] = field(default_factory=list)

    @property
    def revenue_variance(self) -> Decimal:
        return q2(self.declared_revenue - self.expected_revenue)

    def as_dict(self) -> dict:
        return {
            "date_detected": {"date": self.report_date.isoformat(), "source": self.date_source},
            "financials": {
                "total_declared_revenue": to_major_number(self.declared_revenue),
                "total_expected_revenue": to_major_number(self.expected_revenue),
                "revenue_variance": to_major_number(self.revenue_variance),
                "total_cogs": to_major_number(self.total_cogs),
                "row_count": self.row_count,
            },
            "audit_report": self.audit,
            "failed_rows": self.failed_rows,
        }


def parse_money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return Decimal(str(value))
    cleaned = _MONEY_JUNK.sub("", str(value))
    try:
        return Decimal(cleaned) if cleaned else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


def _coerce_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        parsed = parse_datetime(text)
        if parsed is not None:
            return parsed.date()
        return parse_date(text[:10])
    except ValueError:
        return None


def detect_report_date(rows: list[dict]) -> tuple[date, str]:
    if rows:
        first = rows[0]
        for column in DATE_COLUMNS:
            raw = first.get(column)
            found = _coerce_date(raw)
            if found is not None:
                return found, f"Column {column} ({raw})"
    return timezone.localdate(), "System today"


def _declared_revenue(row: dict) -> Decimal:
    for column in REVENUE_COLUMNS:
        if str(row.get(column) or "").strip():
            return parse_money(row[column])
    return Decimal("0")


def analyze_sales_rows(rows: list[dict]) -> SalesAnalysis:
    report_date, date_source = detect_report_date(rows)
    analysis = SalesAnalysis(report_date=report_date, date_source=date_source)

    sales_rows = [r for r in rows if str(r.get(ORDER_ITEMS_COLUMN) or "").strip()]
    if not sales_rows:
        raise SalesImportError("No valid sales data found in file.")

    parsed_rows = []
    pos_strings: list[str] = []
    for index, row in enumerate(sales_rows, start=1):
        items = parse_order_line(str(row[ORDER_ITEMS_COLUMN]))
        if not items:
            analysis.failed_rows.append({"row": index, "error": "No items could be parsed"})
            continue
        parsed_rows.append((items, _declared_revenue(row)))
        for item in items:
            pos_strings.append(item.name)
            pos_strings.extend(m.name for m in item.modifiers)

    unique_strings = list(dict.fromkeys(pos_strings))

    mappings = {
        m.pos_string: m
        for m in ProductMapping.objects.select_related("product").filter(pos_string__in=unique_strings)
    }
    prices = dict(
        PosMenuItem.objects.filter(pos_string__in=unique_strings).values_list("pos_string", "selling_price")
    )

    for name in unique_strings:
        mapping = mappings.get(name)
        if mapping is None:
            analysis.audit.append({"pos_name": name, "status": AUDIT_MISSING_RECIPE, "details": "No recipe mapping found."})
            continue
        product = mapping.product
        if product.cost <= 0:
            analysis.audit.append(
                {
                    "pos_name": name,
                    "status": AUDIT_ZERO_COST,
                    "details": "Product cost is 0.00.",
                    "sku": product.sku,
                    "cost": 0.0,
                }
            )
            continue
        analysis.audit.append(
            {
                "pos_name": name,
                "status": AUDIT_OK,
                "details": "Mapping validated.",
                "sku": product.sku,
                "cost": float(product.cost),
            }
        )

    costs: dict[int, Decimal] = {}
    declared = Decimal("0")
    expected = Decimal("0")

    def deduct(pos_name: str, multiplier: int) -> None:
        mapping = mappings.get(pos_name)
        if mapping is None:
            return
        qty = mapping.quantity * multiplier
        pid = mapping.product_id
        analysis.deductions[pid] = analysis.deductions.get(pid, Decimal("0")) + qty
        costs[pid] = costs.get(pid, Decimal("0")) + qty * mapping.product.cost

    for items, row_revenue in parsed_rows:
        declared += row_revenue
        for item in items:
            expected += prices.get(item.name, Decimal("0")) * item.qty
            deduct(item.name, item.qty)
            for mod in item.modifiers:
                expected += prices.get(mod.name, Decimal("0")) * item.qty * mod.qty
                deduct(mod.name, item.qty * mod.qty)

    analysis.row_count = len(parsed_rows)
    analysis.declared_revenue = q2(declared)
    analysis.expected_revenue = q2(expected)
    analysis.total_cogs = q2(sum(costs.values(), Decimal("0")))

    missing = [a["pos_name"] for a in analysis.audit if a["status"] != AUDIT_OK]
    if missing:
        logger.warning("Sales import: %s POS strings unmapped or zero-cost: %s", len(missing), ", ".join(missing[:20]))

    return analysis


def analyze_sales_file(uploaded_file) -> SalesAnalysis:
    parsed = parse_upload(uploaded_file)
    if not parsed.ok:
        raise SalesImportError("File Parse Error", details=parsed.errors)
    return analyze_sales_rows(parsed.rows)


@transaction.atomic
def execute_sales_import(analysis: SalesAnalysis, *, branch, user=None, file_name: str = "") -> SalesReport:
    if branch is None:
        raise SalesImportError("Branch is required for execution")

    has_deductions = any(qty > 0 for qty in analysis.deductions.values())

    report = SalesReport.objects.create(
        branch=branch,
        file_name=file_name or "",
        report_date=analysis.report_date,
        net_revenue=analysis.declared_revenue,
        expected_revenue=analysis.expected_revenue,
        revenue_variance=analysis.revenue_variance,
        total_cogs=analysis.total_cogs,
        row_count=analysis.row_count,
        audit=analysis.audit,
        status=SalesReport.Status.SUCCESS if has_deductions else SalesReport.Status.THEORETICAL_ONLY,
        uploaded_by=user,
    )

    occurred_at = as_posted_at(analysis.report_date)
    products = Product.objects.in_bulk(list(analysis.deductions))

    for product_id, qty in analysis.deductions.items():
        if qty <= 0:
            continue
        apply_stock_change(
            product=products[product_id],
            branch=branch,
            delta=-qty,
            transaction_type=InventoryTransaction.Type.SALE,
            user=user,
            allow_negative=True,
            source_branch=branch,
            reference=f"SALES:{report.id}",
            notes=f"Sales import: {file_name or report.report_date}",
            occurred_at=occurred_at,
        )

    logger.info(
        "Sales import executed: report #%s branch %s date %s revenue %s cogs %s (%s products deducted)",
        report.id,
        branch.pk,
        report.report_date,
        report.net_revenue,
        report.total_cogs,
        len(analysis.deductions),
    )
    return report
