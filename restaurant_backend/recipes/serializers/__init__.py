from recipes.serializers.production import ProductionBatchSerializer, ProductionInputSerializer
from recipes.serializers.recipe import (
    PosMenuItemSerializer,
    ProductMappingSerializer,
    RecipeIngredientSerializer,
    RecipeSerializer,
)
from recipes.serializers.sales import SalesImportSerializer, SalesReportSerializer

__all__ = [
    "RecipeSerializer",
    "RecipeIngredientSerializer",
    "PosMenuItemSerializer",
    "ProductMappingSerializer",
    "ProductionBatchSerializer",
    "ProductionInputSerializer",
    "SalesImportSerializer",
    "SalesReportSerializer",
]
