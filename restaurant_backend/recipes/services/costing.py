# recipes/services/costing.py

"""
RECIPE COSTING

Cost is computed live from product WAC:

    current_cost      = sum(product.cost * ingredient.quantity)
    cost_per_serving  = current_cost / serving_size
    profit_margin     = selling_price - current_cost         (None without a price)
    food_cost_pct     = current_cost / selling_price * 100   (None without a price)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from accounting.services.money import q2, to_major_number
from recipes.models import Recipe


@dataclass(frozen=True)
class IngredientCost:
    product_id: int
    product_name: str
    quantity: Decimal
    unit: str
    unit_cost: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class RecipeCost:
    recipe: Recipe
    current_cost: Decimal
    cost_per_serving: Decimal
    profit_margin: Decimal | None
    food_cost_pct: Decimal | None
    ingredients: list[IngredientCost] = field(default_factory=list)

    def as_dict(self) -> dict:
        r = self.recipe
        return {
            "recipe_id": r.id,
            "recipe_name": r.name,
            "serving_size": r.serving_size,
            "current_cost": to_major_number(self.current_cost),
            "cost_per_serving": to_major_number(self.cost_per_serving),
            "target_cost": to_major_number(r.target_cost) if r.target_cost is not None else None,
            "selling_price": to_major_number(r.selling_price) if r.selling_price is not None else None,
            "profit_margin": to_major_number(self.profit_margin) if self.profit_margin is not None else None,
            "food_cost_pct": float(self.food_cost_pct) if self.food_cost_pct is not None else None,
            "ingredient_costs": [
                {
                    "product_id": i.product_id,
                    "product_name": i.product_name,
                    "quantity": float(i.quantity),
                    "unit": i.unit,
                    "unit_cost": float(i.unit_cost),
                    "total_cost": to_major_number(i.total_cost),
                }
                for i in self.ingredients
            ],
        }


def calculate_recipe_cost(recipe: Recipe) -> RecipeCost:
    lines = []
    total = Decimal("0")

    for ing in recipe.ingredients.select_related("product"):
        line_cost = ing.product.cost * ing.quantity
        total += line_cost
        lines.append(
            IngredientCost(
                product_id=ing.product_id,
                product_name=ing.product.name,
                quantity=ing.quantity,
                unit=ing.unit or ing.product.unit,
                unit_cost=ing.product.cost,
                total_cost=q2(line_cost),
            )
        )

    current = q2(total)
    per_serving = q2(total / Decimal(recipe.serving_size or 1))

    price = recipe.selling_price
    if price:
        margin = q2(price - current)
        food_cost_pct = q2(current / price * 100)
    else:
        margin = None
        food_cost_pct = None

    return RecipeCost(
        recipe=recipe,
        current_cost=current,
        cost_per_serving=per_serving,
        profit_margin=margin,
        food_cost_pct=food_cost_pct,
        ingredients=lines,
    )
