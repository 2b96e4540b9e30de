# recipes/serializers/production.py

from decimal import Decimal

from rest_framework import serializers

from branches.models import Branch
from inventory.models import Product
from recipes.models import ProductionBatch, ProductionIngredient, Recipe


class ProductionIngredientSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = ProductionIngredient
        fields = ("id", "product", "product_name", "quantity_used", "unit_cost")
        read_only_fields = fields


class ProductionBatchSerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    output_product_name = serializers.CharField(source="output_product.name", read_only=True)
    ingredients = ProductionIngredientSerializer(many=True, read_only=True)

    class Meta:
        model = ProductionBatch
        fields = (
            "id",
            "branch",
            "branch_name",
            "recipe",
            "output_product",
            "output_product_name",
            "quantity_produced",
            "total_cost",
            "unit_cost",
            "notes",
            "ingredients",
            "produced_by",
            "produced_at",
        )
        read_only_fields = fields


class ProductionInputIngredientSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source="product")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=Decimal("0.001"))


class ProductionInputSerializer(serializers.Serializer):
    branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all(), source="branch")
    output_product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source="output_product")
    quantity_produced = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=Decimal("0.001"))
    recipe_id = serializers.PrimaryKeyRelatedField(
        queryset=Recipe.objects.all(),
        source="recipe",
        required=False,
        allow_null=True,
    )
    ingredients = ProductionInputIngredientSerializer(many=True, required=False)
    notes = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("ingredients") and not attrs.get("recipe"):
            raise serializers.ValidationError({"ingredients": "Provide ingredients or a recipe"})
        return attrs
