# recipes/views/recipes.py

"""
RECIPE + POS LOOKUP ENDPOINTS

/api/recipes/recipes/            CRUD (ingredients nested)
/api/recipes/recipes/<id>/cost/  live cost from product WAC
/api/recipes/menu-items/         POS string -> selling price
/api/recipes/mappings/           POS string -> product deduction
"""

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_INVENTORY_VIEW, CAP_RECIPES_EDIT, HasCapability
from recipes.models import PosMenuItem, ProductMapping, Recipe
from recipes.serializers import PosMenuItemSerializer, ProductMappingSerializer, RecipeSerializer
from recipes.services.costing import calculate_recipe_cost


class _RecipesPermissionMixin:
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_RECIPES_EDIT,
        "PUT": CAP_RECIPES_EDIT,
        "PATCH": CAP_RECIPES_EDIT,
        "DELETE": CAP_RECIPES_EDIT,
    }


@extend_schema(tags=["recipes"])
class RecipeViewSet(_RecipesPermissionMixin, viewsets.ModelViewSet):
    serializer_class = RecipeSerializer
    filterset_fields = ["is_active"]

    def get_queryset(self):
        return Recipe.objects.prefetch_related("ingredients__product").order_by("name")

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"])
    def cost(self, request, pk=None):
        return Response(calculate_recipe_cost(self.get_object()).as_dict())


@extend_schema(tags=["recipes"])
class PosMenuItemViewSet(_RecipesPermissionMixin, viewsets.ModelViewSet):
    serializer_class = PosMenuItemSerializer
    queryset = PosMenuItem.objects.order_by("pos_string")


@extend_schema(tags=["recipes"])
class ProductMappingViewSet(_RecipesPermissionMixin, viewsets.ModelViewSet):
    serializer_class = ProductMappingSerializer
    queryset = ProductMapping.objects.select_related("product").order_by("pos_string")
    filterset_fields = ["product"]
