# users/admin.py

"""
USERS ADMIN REGISTRATION

Registers the custom User model with restaurant fields (role, hourly rate,
branch assignments) exposed for managers working in Django Admin.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "username", "role", "hourly_rate", "is_active", "is_superuser")
    list_filter = ("role", "is_staff", "is_active", "is_superuser", "branches")
    search_fields = ("email", "username", "first_name", "last_name")
    filter_horizontal = ("branches", "groups", "user_permissions")

    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "role")}),
        ("Payroll", {"fields": ("hourly_rate", "cliq_alias")}),
        ("Branches", {"fields": ("branches", "default_branch")}),
        (
            "Permissions",
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role", "is_staff", "is_active"),
            },
        ),
    )
