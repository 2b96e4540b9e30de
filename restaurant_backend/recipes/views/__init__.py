from recipes.views.production import ProductionBatchViewSet
from recipes.views.recipes import PosMenuItemViewSet, ProductMappingViewSet, RecipeViewSet
from recipes.views.sales import SalesImportView, SalesReportViewSet

__all__ = [
    "RecipeViewSet",
    "PosMenuItemViewSet",
    "ProductMappingViewSet",
    "ProductionBatchViewSet",
    "SalesImportView",
    "SalesReportViewSet",
]
