# recipes/admin.py

from django.contrib import admin

from accounting.admin import ReadOnlyAdminMixin
from recipes.models import (
    PosMenuItem,
    ProductionBatch,
    ProductionIngredient,
    ProductMapping,
    Recipe,
    RecipeIngredient,
    SalesReport,
)


class RecipeIngredientInline(admin.TabularInline):
    model = RecipeIngredient
    extra = 1
    autocomplete_fields = ("product",)


@admin.register(Recipe)
class RecipeAdmin(admin.ModelAdmin):
    list_display = ("name", "serving_size", "selling_price", "target_cost", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
    inlines = [RecipeIngredientInline]


@admin.register(PosMenuItem)
class PosMenuItemAdmin(admin.ModelAdmin):
    list_display = ("pos_string", "selling_price", "recipe")
    search_fields = ("pos_string",)


@admin.register(ProductMapping)
class ProductMappingAdmin(admin.ModelAdmin):
    list_display = ("pos_string", "product", "quantity")
    search_fields = ("pos_string", "product__name", "product__sku")


@admin.register(SalesReport)
class SalesReportAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("report_date", "branch", "status", "net_revenue", "expected_revenue", "total_cogs", "uploaded_at")
    list_filter = ("status", "branch")
    date_hierarchy = "report_date"


class ProductionIngredientInline(admin.TabularInline):
    model = ProductionIngredient
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity_used", "unit_cost")


@admin.register(ProductionBatch)
class ProductionBatchAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("produced_at", "branch", "output_product", "quantity_produced", "total_cost", "unit_cost")
    list_filter = ("branch",)
    date_hierarchy = "produced_at"
    inlines = [ProductionIngredientInline]
