# recipes/apps.py

"""
RECIPES APP CONFIG

Recipe costing, POS menu prices, POS-to-product mappings and imported POS
sales reports (the theoretical side of variance reconciliation).
"""

from django.apps import AppConfig


class RecipesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "recipes"
    verbose_name = "Recipes & Sales"
