# recipes/urls.py

"""
RECIPES URLS (/api/recipes/)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from recipes.views import (
    PosMenuItemViewSet,
    ProductionBatchViewSet,
    ProductMappingViewSet,
    RecipeViewSet,
    SalesImportView,
    SalesReportViewSet,
)

router = DefaultRouter()

router.register(r"recipes", RecipeViewSet, basename="recipes")
router.register(r"menu-items", PosMenuItemViewSet, basename="menu-items")
router.register(r"mappings", ProductMappingViewSet, basename="product-mappings")
router.register(r"sales-reports", SalesReportViewSet, basename="sales-reports")
router.register(r"production", ProductionBatchViewSet, basename="production")

urlpatterns = [
    path("sales-import/", SalesImportView.as_view(), name="sales-import"),
    path("", include(router.urls)),
]
