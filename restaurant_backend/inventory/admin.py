# inventory/admin.py

from django.contrib import admin

from accounting.admin import ReadOnlyAdminMixin
from inventory.models import (
    InventoryLevel,
    InventoryTransaction,
    Product,
    PurchaseInvoice,
    PurchaseInvoiceItem,
    StockCount,
    StockCountLine,
    TransferItem,
    TransferRequest,
    WasteLog,
)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "unit", "category", "cost", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("sku", "name")
    readonly_fields = ("cost", "created_at", "updated_at")


@admin.register(InventoryLevel)
class InventoryLevelAdmin(admin.ModelAdmin):
    list_display = ("product", "branch", "quantity_on_hand", "reorder_point", "par_level")
    list_filter = ("branch",)
    search_fields = ("product__name", "product__sku")
    readonly_fields = ("quantity_on_hand", "updated_at")


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("occurred_at", "transaction_type", "product", "branch", "delta", "unit_cost", "reference")
    list_filter = ("transaction_type", "branch")
    search_fields = ("product__name", "reference", "notes")
    date_hierarchy = "occurred_at"


class PurchaseInvoiceItemInline(admin.TabularInline):
    model = PurchaseInvoiceItem
    extra = 0


@admin.register(PurchaseInvoice)
class PurchaseInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "vendor", "branch", "invoice_date", "status", "journal_entry")
    list_filter = ("status", "branch")
    search_fields = ("invoice_number", "vendor__name")
    readonly_fields = ("status", "received_by", "received_at", "journal_entry", "created_at")
    inlines = [PurchaseInvoiceItemInline]


@admin.register(WasteLog)
class WasteLogAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("occurred_at", "product", "branch", "quantity", "reason", "cost_impact")
    list_filter = ("reason", "branch")
    date_hierarchy = "occurred_at"


class TransferItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = TransferItem
    extra = 0


@admin.register(TransferRequest)
class TransferRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "from_branch", "to_branch", "status", "sent_at", "received_at")
    list_filter = ("status",)
    readonly_fields = ("status", "sent_by", "sent_at", "received_by", "received_at", "journal_entry")
    inlines = [TransferItemInline]


class StockCountLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = StockCountLine
    extra = 0


@admin.register(StockCount)
class StockCountAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "branch", "counted_at", "counted_by", "net_value", "journal_entry")
    list_filter = ("branch",)
    inlines = [StockCountLineInline]
