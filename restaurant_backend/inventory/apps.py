# inventory/apps.py

"""
INVENTORY APP CONFIG

Products, per-branch stock levels and the append-only inventory transaction
log (purchases, waste, transfers, counts, sales deductions).
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory"
