from inventory.views.analytics import FoodCostView
from inventory.views.operations import (
    PurchaseInvoiceViewSet,
    StockCountViewSet,
    TransferRequestViewSet,
    WasteLogViewSet,
)
from inventory.views.products import InventoryLevelViewSet, InventoryTransactionViewSet, ProductViewSet

__all__ = [
    "ProductViewSet",
    "InventoryLevelViewSet",
    "InventoryTransactionViewSet",
    "PurchaseInvoiceViewSet",
    "WasteLogViewSet",
    "TransferRequestViewSet",
    "StockCountViewSet",
    "FoodCostView",
]
