from inventory.serializers.operations import (
    PurchaseInvoiceCreateSerializer,
    PurchaseInvoiceSerializer,
    StockCountCreateSerializer,
    StockCountSerializer,
    TransferCreateSerializer,
    TransferRequestSerializer,
    WasteCreateSerializer,
    WasteLogSerializer,
)
from inventory.serializers.product import (
    InventoryLevelSerializer,
    InventoryTransactionSerializer,
    ProductImportSerializer,
    ProductSerializer,
)

__all__ = [
    "ProductSerializer",
    "ProductImportSerializer",
    "InventoryLevelSerializer",
    "InventoryTransactionSerializer",
    "PurchaseInvoiceSerializer",
    "PurchaseInvoiceCreateSerializer",
    "WasteLogSerializer",
    "WasteCreateSerializer",
    "TransferRequestSerializer",
    "TransferCreateSerializer",
    "StockCountSerializer",
    "StockCountCreateSerializer",
]
