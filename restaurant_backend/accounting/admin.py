# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    Account,
    AccountingMapping,
    ChartOfAccounts,
    Expense,
    ExpenseCategory,
    JournalEntry,
    LedgerEntry,
    PeriodClose,
    Vendor,
)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# CHART OF ACCOUNTS
# ============================================================


@admin.register(ChartOfAccounts)
class ChartOfAccountsAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "industry", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "account_type", "chart", "is_active")
    list_filter = ("account_type", "is_active", "chart")
    search_fields = ("code", "name")
    ordering = ("chart", "code")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("Account Identity", {"fields": ("chart", "code", "name", "account_type", "description")}),
        ("Status", {"fields": ("is_active",)}),
        ("System Fields", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(AccountingMapping)
class AccountingMappingAdmin(admin.ModelAdmin):
    list_display = ("event_key", "account", "chart", "updated_at")
    list_filter = ("chart",)
    search_fields = ("event_key", "account__code", "account__name")


# ============================================================
# JOURNAL (STRICTLY IMMUTABLE)
# ============================================================


class LedgerEntryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = LedgerEntry
    extra = 0
    fields = ("account", "branch", "entry_type", "amount", "memo")
    readonly_fields = fields


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "description", "reference", "source_type", "branch", "posted_at")
    list_filter = ("source_type", "branch")
    search_fields = ("description", "reference")
    ordering = ("-posted_at",)
    inlines = [LedgerEntryInline]


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "journal_entry", "account", "branch", "entry_type", "amount", "created_at")
    list_filter = ("entry_type", "branch", "account")
    search_fields = ("journal_entry__reference", "account__code")


@admin.register(PeriodClose)
class PeriodCloseAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("chart", "start_date", "end_date", "journal_entry", "closed_by", "created_at")


# ============================================================
# EXPENSES + VENDORS
# ============================================================


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "debit_account", "credit_account", "is_active")
    list_filter = ("is_active",)


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("id", "expense_date", "amount", "status", "submitted_by", "branch", "reviewed_by")
    list_filter = ("status", "branch")
    search_fields = ("description", "submitted_by__email")
    readonly_fields = ("journal_entry", "reviewed_by", "reviewed_at", "created_at")


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_name", "phone", "email", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "email")
