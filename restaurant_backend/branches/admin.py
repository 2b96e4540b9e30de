# branches/admin.py

from django.contrib import admin

from branches.models import Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "branch_type", "is_active", "created_at")
    list_filter = ("branch_type", "is_active")
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
