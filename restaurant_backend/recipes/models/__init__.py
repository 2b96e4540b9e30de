from recipes.models.pos import PosMenuItem, ProductMapping
from recipes.models.production import ProductionBatch, ProductionIngredient
from recipes.models.recipe import Recipe, RecipeIngredient
from recipes.models.sales_report import SalesReport

__all__ = [
    "Recipe",
    "RecipeIngredient",
    "PosMenuItem",
    "ProductMapping",
    "ProductionBatch",
    "ProductionIngredient",
    "SalesReport",
]
