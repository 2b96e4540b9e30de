# accounting/api/serializers/expenses.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.account import Account
from accounting.models.expense import Expense, ExpenseCategory
from accounting.models.vendor import Vendor
from branches.models import Branch


class ExpenseCategorySerializer(serializers.ModelSerializer):
    debit_account_code = serializers.CharField(source="debit_account.code", read_only=True, default=None)
    credit_account_code = serializers.CharField(source="credit_account.code", read_only=True, default=None)

    class Meta:
        model = ExpenseCategory
        fields = (
            "id",
            "name",
            "description",
            "debit_account",
            "debit_account_code",
            "credit_account",
            "credit_account_code",
            "is_active",
        )
        read_only_fields = ("id",)


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth).
    """

    submitted_by_email = serializers.EmailField(source="submitted_by.email", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    debit_account_code = serializers.CharField(source="debit_account.code", read_only=True, default=None)
    credit_account_code = serializers.CharField(source="credit_account.code", read_only=True, default=None)

    class Meta:
        model = Expense
        fields = (
            "id",
            "submitted_by",
            "submitted_by_email",
            "branch",
            "category",
            "category_name",
            "custom_category",
            "amount",
            "expense_date",
            "description",
            "notes",
            "status",
            "reviewed_by",
            "reviewed_at",
            "rejection_reason",
            "debit_account",
            "debit_account_code",
            "credit_account",
            "credit_account_code",
            "journal_entry",
            "created_at",
        )
        read_only_fields = fields


class ExpenseSubmitSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    expense_date = serializers.DateField(required=False)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=ExpenseCategory.objects.filter(is_active=True),
        source="category",
        required=False,
        allow_null=True,
    )
    custom_category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True), source="branch", required=False, allow_null=True
    )


class ExpenseApproveSerializer(serializers.Serializer):
    debit_account_id = serializers.PrimaryKeyRelatedField(
        queryset=Account.objects.filter(is_active=True), source="debit_account", required=False
    )
    credit_account_id = serializers.PrimaryKeyRelatedField(
        queryset=Account.objects.filter(is_active=True), source="credit_account", required=False
    )


class ExpenseRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = (
            "id",
            "name",
            "contact_name",
            "phone",
            "email",
            "address",
            "tax_id",
            "is_active",
            "created_at",
        )
        read_only_fields = ("id", "created_at")
