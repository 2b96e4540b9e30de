# permissions/roles.py

from __future__ import annotations

from rest_framework.permissions import BasePermission

# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CHEF = "chef"
ROLE_CASHIER = "cashier"
ROLE_EMPLOYEE = "employee"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_CHEF, "Chef"),
    (ROLE_CASHIER, "Cashier"),
    (ROLE_EMPLOYEE, "Employee"),
]

# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ACCOUNTING_VIEW = "accounting.view"
CAP_ACCOUNTING_POST = "accounting.post"      # manual entries, reversals, expense approval
CAP_ACCOUNTING_CLOSE = "accounting.close"    # period close
CAP_ACCOUNTING_SETUP = "accounting.setup"    # chart + mappings

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"    # counts, waste, transfers

CAP_RECIPES_EDIT = "recipes.edit"
CAP_SALES_IMPORT = "sales.import"

CAP_PAYROLL_MANAGE = "payroll.manage"
CAP_SCHEDULE_MANAGE = "schedule.manage"
CAP_EXPENSE_SUBMIT = "expenses.submit"

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_ACCOUNTING_VIEW,
    CAP_ACCOUNTING_POST,
    CAP_ACCOUNTING_CLOSE,
    CAP_ACCOUNTING_SETUP,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_RECIPES_EDIT,
    CAP_SALES_IMPORT,
    CAP_PAYROLL_MANAGE,
    CAP_SCHEDULE_MANAGE,
    CAP_EXPENSE_SUBMIT,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {*ALL_CAPABILITIES},
    ROLE_MANAGER: {
        CAP_ACCOUNTING_VIEW,
        CAP_ACCOUNTING_POST,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_RECIPES_EDIT,
        CAP_SALES_IMPORT,
        CAP_PAYROLL_MANAGE,
        CAP_SCHEDULE_MANAGE,
        CAP_EXPENSE_SUBMIT,
        CAP_REPORTS_VIEW,
    },
    ROLE_CHEF: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_RECIPES_EDIT,
        CAP_EXPENSE_SUBMIT,
    },
    ROLE_CASHIER: {
        CAP_INVENTORY_VIEW,
        CAP_SALES_IMPORT,
        CAP_EXPENSE_SUBMIT,
    },
    ROLE_EMPLOYEE: {
        CAP_EXPENSE_SUBMIT,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> str | None:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


# =========================================================
# Role permissions
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        return get_user_role(user) in self.allowed_roles


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsManagerOrAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN, ROLE_MANAGER}


# =========================================================
# Capability permissions (recommended for views)
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_INVENTORY_ADJUST

    Views that need different capabilities per method can set
    `required_capabilities = {"GET": CAP_X, "POST": CAP_Y}` instead.
    """

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        # Unsupported methods fall through so the view answers 405.
        if request.method not in getattr(view, "allowed_methods", [request.method]):
            return True

        method = "GET" if request.method in ("HEAD", "OPTIONS") else request.method
        per_method = getattr(view, "required_capabilities", None) or {}
        required = per_method.get(method) or getattr(
            view, "required_capability", None
        )
        if not required:
            # Deny by default to avoid accidentally open endpoints.
            return False

        return user_has_capability(user, required)
