# recipes/serializers/recipe.py

from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from inventory.models import Product
from recipes.models import PosMenuItem, ProductMapping, Recipe, RecipeIngredient


class RecipeIngredientSerializer(serializers.ModelSerializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source="product")
    product_name = serializers.CharField(source="product.name", read_only=True)
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=Decimal("0.001"))

    class Meta:
        model = RecipeIngredient
        fields = ("id", "product_id", "product_name", "quantity", "unit")
        read_only_fields = ("id", "product_name")


class RecipeSerializer(serializers.ModelSerializer):
    """
    Ingredients are written as a full list: create sets them, update replaces
    them when `ingredients` is present.
    """

    ingredients = RecipeIngredientSerializer(many=True, required=False)

    class Meta:
        model = Recipe
        fields = (
            "id",
            "name",
            "description",
            "serving_size",
            "selling_price",
            "target_cost",
            "is_active",
            "ingredients",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_ingredients(self, value):
        product_ids = [row["product"].pk for row in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("A product can only appear once per recipe")
        return value

    def _write_ingredients(self, recipe, rows):
        recipe.ingredients.all().delete()
        RecipeIngredient.objects.bulk_create(
            [
                RecipeIngredient(
                    recipe=recipe,
                    product=row["product"],
                    quantity=row["quantity"],
                    unit=row.get("unit", ""),
                )
                for row in rows
            ]
        )

    @transaction.atomic
    def create(self, validated_data):
        rows = validated_data.pop("ingredients", [])
        recipe = Recipe.objects.create(**validated_data)
        self._write_ingredients(recipe, rows)
        return recipe

    @transaction.atomic
    def update(self, instance, validated_data):
        rows = validated_data.pop("ingredients", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if rows is not None:
            self._write_ingredients(instance, rows)
        return instance


class PosMenuItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PosMenuItem
        fields = ("id", "pos_string", "selling_price", "recipe", "updated_at")
        read_only_fields = ("id", "updated_at")


class ProductMappingSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = ProductMapping
        fields = ("id", "pos_string", "product", "product_name", "sku", "quantity", "updated_at")
        read_only_fields = ("id", "product_name", "sku", "updated_at")
