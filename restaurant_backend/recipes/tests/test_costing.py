# recipes/tests/test_costing.py

from decimal import Decimal

from django.test import TestCase

from inventory.models import Product
from recipes.models import Recipe, RecipeIngredient
from recipes.services.costing import calculate_recipe_cost


class RecipeCostingTests(TestCase):
    def setUp(self):
        self.patty = Product.objects.create(sku="PATTY", name="Beef Patty", unit="pcs", cost=Decimal("2.0000"))
        self.bun = Product.objects.create(sku="BUN", name="Bun", unit="pcs", cost=Decimal("0.5000"))

        self.recipe = Recipe.objects.create(name="Double Burger", serving_size=2, selling_price=Decimal("10.00"))
        RecipeIngredient.objects.create(recipe=self.recipe, product=self.patty, quantity=Decimal("2"))
        RecipeIngredient.objects.create(recipe=self.recipe, product=self.bun, quantity=Decimal("2"), unit="pcs")

    def test_cost_follows_product_wac(self):
        cost = calculate_recipe_cost(self.recipe)

        self.assertEqual(cost.current_cost, Decimal("5.00"))
        self.assertEqual(cost.cost_per_serving, Decimal("2.50"))
        self.assertEqual(cost.profit_margin, Decimal("5.00"))
        self.assertEqual(cost.food_cost_pct, Decimal("50.00"))
        self.assertEqual(len(cost.ingredients), 2)

        self.patty.cost = Decimal("3.0000")
        self.patty.save()

        self.assertEqual(calculate_recipe_cost(self.recipe).current_cost, Decimal("7.00"))

    def test_without_price_has_no_margin(self):
        recipe = Recipe.objects.create(name="Staff Soup")
        RecipeIngredient.objects.create(recipe=recipe, product=self.bun, quantity=Decimal("1"))

        data = calculate_recipe_cost(recipe).as_dict()

        self.assertIsNone(data["profit_margin"])
        self.assertIsNone(data["food_cost_pct"])
        self.assertEqual(data["current_cost"], 0.5)
        self.assertEqual(data["ingredient_costs"][0]["unit"], "pcs")
