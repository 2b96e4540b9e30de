# inventory/urls.py

"""
INVENTORY URLS (/api/inventory/)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.views import (
    FoodCostView,
    InventoryLevelViewSet,
    InventoryTransactionViewSet,
    ProductViewSet,
    PurchaseInvoiceViewSet,
    StockCountViewSet,
    TransferRequestViewSet,
    WasteLogViewSet,
)

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"levels", InventoryLevelViewSet, basename="inventory-levels")
router.register(r"transactions", InventoryTransactionViewSet, basename="inventory-transactions")
router.register(r"purchases", PurchaseInvoiceViewSet, basename="purchases")
router.register(r"waste", WasteLogViewSet, basename="waste")
router.register(r"transfers", TransferRequestViewSet, basename="transfers")
router.register(r"stock-counts", StockCountViewSet, basename="stock-counts")

urlpatterns = [
    path("analytics/food-cost/", FoodCostView.as_view(), name="food-cost"),
    path("", include(router.urls)),
]
