# inventory/serializers/product.py

from decimal import Decimal

from rest_framework import serializers

from inventory.models import InventoryLevel, InventoryTransaction, Product


class ProductSerializer(serializers.ModelSerializer):
    """
    cost is read-only over the API: it is the weighted average maintained by
    purchase receiving. Opening cost comes from the product import.
    """

    total_on_hand = serializers.DecimalField(max_digits=14, decimal_places=3, read_only=True, default=None)

    class Meta:
        model = Product
        fields = (
            "id",
            "sku",
            "name",
            "unit",
            "category",
            "cost",
            "selling_price",
            "is_active",
            "total_on_hand",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "cost", "total_on_hand", "created_at", "updated_at")


class InventoryLevelSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    unit = serializers.CharField(source="product.unit", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    is_below_reorder_point = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryLevel
        fields = (
            "id",
            "product",
            "product_name",
            "sku",
            "unit",
            "branch",
            "branch_name",
            "quantity_on_hand",
            "reorder_point",
            "par_level",
            "is_below_reorder_point",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "product",
            "branch",
            "quantity_on_hand",
            "updated_at",
        )

    def validate(self, attrs):
        reorder = attrs.get("reorder_point", getattr(self.instance, "reorder_point", Decimal("0")))
        par = attrs.get("par_level", getattr(self.instance, "par_level", Decimal("0")))
        if par and reorder and par < reorder:
            raise serializers.ValidationError({"par_level": "par_level cannot be below reorder_point"})
        return attrs


class InventoryTransactionSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta:
        model = InventoryTransaction
        fields = (
            "id",
            "transaction_type",
            "product",
            "product_name",
            "branch",
            "source_branch",
            "dest_branch",
            "quantity",
            "delta",
            "unit_cost",
            "reference",
            "notes",
            "user",
            "user_email",
            "occurred_at",
            "created_at",
        )
        read_only_fields = fields


class ProductImportSerializer(serializers.Serializer):
    file = serializers.FileField()
