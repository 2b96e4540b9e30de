from inventory.models.product import Product
from inventory.models.purchase import PurchaseInvoice, PurchaseInvoiceItem
from inventory.models.stock import InventoryLevel, InventoryTransaction
from inventory.models.stock_count import StockCount, StockCountLine
from inventory.models.transfer import TransferItem, TransferRequest
from inventory.models.waste import WasteLog

__all__ = [
    "Product",
    "InventoryLevel",
    "InventoryTransaction",
    "PurchaseInvoice",
    "PurchaseInvoiceItem",
    "WasteLog",
    "TransferRequest",
    "TransferItem",
    "StockCount",
    "StockCountLine",
]
