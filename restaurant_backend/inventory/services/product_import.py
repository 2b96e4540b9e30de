# inventory/services/product_import.py

"""
PRODUCT IMPORT

Upsert products by SKU from an uploaded spreadsheet.

Expected columns (snake_case after normalisation):
    sku, name, unit, cost, category
`cost` also accepts `initial_cost`; `unit` also accepts `base_unit`.

Rows are validated one by one; a bad row is reported and skipped, it does
not abort the whole file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction

from inventory.models import Product
from inventory.services.exceptions import InventoryError
from recipes.services.file_parser import parse_upload

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    errors: list[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"created": self.created, "updated": self.updated, "errors": self.errors}


def _first(row: dict, *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return ""


def _category(raw: str) -> str:
    value = (raw or "").strip().upper()
    return value if value in Product.Category.values else Product.Category.OTHER


def _cost(raw: str) -> Decimal | None:
    if not raw:
        return None
    try:
        cost = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        raise InventoryError(f"Invalid cost: {raw}")
    if cost < 0:
        raise InventoryError("cost cannot be negative")
    return cost


def import_product_rows(rows: list[dict]) -> ImportResult:
    result = ImportResult()

    for index, row in enumerate(rows, start=2):  # row 1 is the header
        sku = _first(row, "sku", "code").upper()
        name = _first(row, "name", "product_name")
        if not sku or not name:
            result.errors.append({"row": index, "error": "sku and name are required"})
            continue

        try:
            cost = _cost(_first(row, "cost", "initial_cost", "unit_cost"))
            with transaction.atomic():
                product = Product.objects.filter(sku=sku).first()
                created = product is None
                if created:
                    product = Product(sku=sku)

                product.name = name
                product.unit = _first(row, "unit", "base_unit") or product.unit or "unit"
                if _first(row, "category"):
                    product.category = _category(_first(row, "category"))
                if cost is not None:
                    product.cost = cost
                product.save()
        except (InventoryError, ValidationError) as exc:
            message = "; ".join(exc.messages) if isinstance(exc, ValidationError) else str(exc)
            result.errors.append({"row": index, "sku": sku, "error": message})
            continue

        if created:
            result.created += 1
        else:
            result.updated += 1

    logger.info(
        "Product import: %s created, %s updated, %s rejected",
        result.created,
        result.updated,
        len(result.errors),
    )
    return result


def import_products(uploaded_file) -> ImportResult:
    parsed = parse_upload(uploaded_file)
    if not parsed.ok:
        raise InventoryError("; ".join(parsed.errors))
    return import_product_rows(parsed.rows)
