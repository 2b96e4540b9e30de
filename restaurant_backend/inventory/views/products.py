# inventory/views/products.py

"""
PRODUCT + STOCK LEVEL ENDPOINTS

GET/POST/PATCH /api/inventory/products/           catalogue (?q, ?category, ?is_active)
POST           /api/inventory/products/import/    spreadsheet upsert by SKU
GET/PATCH      /api/inventory/levels/             per-branch on-hand, reorder point, par
GET            /api/inventory/levels/par-suggestions/
GET            /api/inventory/transactions/       append-only movement log
"""

from decimal import Decimal

from django.db.models import DecimalField, F, Q, Sum
from django.db.models.functions import Coalesce
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_window
from accounting.services.money import end_of_day_exclusive, start_of_day
from branches.context import branch_filter_for_request, resolve_branch_ids
from inventory.models import InventoryLevel, InventoryTransaction, Product
from inventory.serializers import (
    InventoryLevelSerializer,
    InventoryTransactionSerializer,
    ProductImportSerializer,
    ProductSerializer,
)
from inventory.services.exceptions import InventoryError
from inventory.services.par_service import par_suggestions
from inventory.services.product_import import import_products
from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability


@extend_schema(
    tags=["inventory"],
    parameters=[
        OpenApiParameter(name="q", type=str, required=False, description="Search name or SKU"),
    ],
)
class ProductViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_EDIT,
        "PATCH": CAP_INVENTORY_EDIT,
        "PUT": CAP_INVENTORY_EDIT,
    }
    serializer_class = ProductSerializer
    filterset_fields = ["category", "is_active"]
    http_method_names = ["get", "post", "patch", "put", "head", "options"]

    def get_queryset(self):
        qs = Product.objects.annotate(
            total_on_hand=Coalesce(
                Sum("inventory_levels__quantity_on_hand"),
                Decimal("0"),
                output_field=DecimalField(max_digits=14, decimal_places=3),
            )
        ).order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))
        return qs

    @extend_schema(request={"multipart/form-data": ProductImportSerializer}, responses={200: dict, 400: dict})
    @action(detail=False, methods=["post"], url_path="import", parser_classes=[MultiPartParser, FormParser])
    def import_file(self, request):
        s = ProductImportSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = import_products(s.validated_data["file"])
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(result.as_dict(), status=status.HTTP_200_OK)


@extend_schema(tags=["inventory"])
class InventoryLevelViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "PATCH": CAP_INVENTORY_EDIT,
    }
    serializer_class = InventoryLevelSerializer
    filterset_fields = ["product", "branch"]
    http_method_names = ["get", "patch", "head", "options"]

    def get_queryset(self):
        qs = InventoryLevel.objects.select_related("product", "branch").order_by("product__name", "branch__name")
        qs = qs.filter(**branch_filter_for_request(self.request))
        if self.request.query_params.get("below_reorder") in ("1", "true", "True"):
            qs = qs.filter(reorder_point__gt=0, quantity_on_hand__lt=F("reorder_point"))
        return qs

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="par-suggestions")
    def par_suggestions(self, request):
        return Response(par_suggestions(branch_ids=resolve_branch_ids(request)))


@extend_schema(
    tags=["inventory"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, required=False),
        OpenApiParameter(name="end_date", type=str, required=False),
    ],
)
class InventoryTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = InventoryTransactionSerializer
    filterset_fields = ["transaction_type", "product", "reference"]

    def get_queryset(self):
        qs = InventoryTransaction.objects.select_related("product", "user").order_by("-occurred_at", "-id")
        qs = qs.filter(**branch_filter_for_request(self.request))

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(occurred_at__gte=start_of_day(start))
        if end:
            qs = qs.filter(occurred_at__lt=end_of_day_exclusive(end))
        return qs
