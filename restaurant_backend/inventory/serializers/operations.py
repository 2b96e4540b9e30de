# inventory/serializers/operations.py

"""
Serializers for stock workflows: purchases, waste, transfers and counts.

Input serializers only validate shape and resolve ids; business rules live in
inventory/services/.
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.models.vendor import Vendor
from branches.models import Branch
from inventory.models import (
    Product,
    PurchaseInvoice,
    PurchaseInvoiceItem,
    StockCount,
    StockCountLine,
    TransferItem,
    TransferRequest,
    WasteLog,
)

QTY = dict(max_digits=14, decimal_places=3)


def _active_products():
    return Product.objects.filter(is_active=True)


# ------------------------------------------------------------
# PURCHASES
# ------------------------------------------------------------


class PurchaseInvoiceItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseInvoiceItem
        fields = ("id", "product", "product_name", "quantity", "unit_cost", "line_total")
        read_only_fields = fields


class PurchaseInvoiceSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.name", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    items = PurchaseInvoiceItemSerializer(many=True, read_only=True)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseInvoice
        fields = (
            "id",
            "vendor",
            "vendor_name",
            "branch",
            "branch_name",
            "invoice_number",
            "invoice_date",
            "status",
            "notes",
            "items",
            "total_amount",
            "created_by",
            "received_by",
            "received_at",
            "journal_entry",
            "created_at",
        )
        read_only_fields = fields


class PurchaseLineInputSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=_active_products(), source="product")
    quantity = serializers.DecimalField(min_value=Decimal("0.001"), **QTY)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal("0"))


class PurchaseInvoiceCreateSerializer(serializers.Serializer):
    vendor_id = serializers.PrimaryKeyRelatedField(queryset=Vendor.objects.filter(is_active=True), source="vendor")
    branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="branch")
    invoice_number = serializers.CharField(max_length=60)
    invoice_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseLineInputSerializer(many=True)
    receive = serializers.BooleanField(required=False, default=False)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")
        return value


# ------------------------------------------------------------
# WASTE
# ------------------------------------------------------------


class WasteLogSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = WasteLog
        fields = (
            "id",
            "product",
            "product_name",
            "branch",
            "branch_name",
            "quantity",
            "reason",
            "cost_impact",
            "notes",
            "user",
            "journal_entry",
            "occurred_at",
            "created_at",
        )
        read_only_fields = fields


class WasteCreateSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=_active_products(), source="product")
    branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="branch")
    quantity = serializers.DecimalField(min_value=Decimal("0.001"), **QTY)
    reason = serializers.ChoiceField(choices=WasteLog.Reason.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    occurred_at = serializers.DateTimeField(required=False)


# ------------------------------------------------------------
# TRANSFERS
# ------------------------------------------------------------


class TransferItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = TransferItem
        fields = ("id", "product", "product_name", "sku", "quantity", "unit_cost")
        read_only_fields = fields


class TransferRequestSerializer(serializers.ModelSerializer):
    from_branch_name = serializers.CharField(source="from_branch.name", read_only=True)
    to_branch_name = serializers.CharField(source="to_branch.name", read_only=True)
    items = TransferItemSerializer(many=True, read_only=True)

    class Meta:
        model = TransferRequest
        fields = (
            "id",
            "from_branch",
            "from_branch_name",
            "to_branch",
            "to_branch_name",
            "status",
            "notes",
            "items",
            "requested_by",
            "sent_by",
            "sent_at",
            "received_by",
            "received_at",
            "journal_entry",
            "created_at",
        )
        read_only_fields = fields


class TransferLineInputSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=_active_products(), source="product")
    quantity = serializers.DecimalField(min_value=Decimal("0.001"), **QTY)


class TransferCreateSerializer(serializers.Serializer):
    from_branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="from_branch")
    to_branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="to_branch")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = TransferLineInputSerializer(many=True)

    def validate(self, attrs):
        if attrs["from_branch"].pk == attrs["to_branch"].pk:
            raise serializers.ValidationError({"to_branch_id": "Source and destination branches must be different"})
        if not attrs.get("items"):
            raise serializers.ValidationError({"items": "At least one item is required"})
        return attrs


# ------------------------------------------------------------
# STOCK COUNTS
# ------------------------------------------------------------


class StockCountLineSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = StockCountLine
        fields = (
            "id",
            "product",
            "product_name",
            "system_quantity",
            "counted_quantity",
            "variance",
            "unit_cost",
        )
        read_only_fields = fields


class StockCountSerializer(serializers.ModelSerializer):
    lines = StockCountLineSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = StockCount
        fields = (
            "id",
            "branch",
            "branch_name",
            "counted_by",
            "counted_at",
            "notes",
            "net_value",
            "journal_entry",
            "lines",
            "created_at",
        )
        read_only_fields = fields


class CountLineInputSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source="product")
    counted_quantity = serializers.DecimalField(min_value=Decimal("0"), **QTY)


class StockCountCreateSerializer(serializers.Serializer):
    branch_id = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.filter(is_active=True), source="branch")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = CountLineInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one counted item is required")
        return value
