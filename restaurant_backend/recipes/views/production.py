# recipes/views/production.py

"""
PRODUCTION ENDPOINTS

GET  /api/recipes/production/       batch history (branch selection, ?start_date,
                                    ?end_date, ?output_product)
POST /api/recipes/production/       record a batch -> 201
GET  /api/recipes/production/<id>/  one batch with consumed ingredients
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_window
from branches.context import branch_filter_for_request, has_access_to_branch
from inventory.services.exceptions import InventoryError
from permissions.roles import CAP_INVENTORY_ADJUST, CAP_INVENTORY_VIEW, HasCapability
from recipes.models import ProductionBatch
from recipes.serializers import ProductionBatchSerializer, ProductionInputSerializer
from recipes.services.production import record_production


@extend_schema(tags=["recipes"])
class ProductionBatchViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_ADJUST,
    }
    serializer_class = ProductionBatchSerializer
    filterset_fields = ["output_product", "recipe"]
    http_method_names = ["get", "post", "head", "options"]

    def get_queryset(self):
        qs = (
            ProductionBatch.objects.select_related("branch", "output_product")
            .prefetch_related("ingredients__product")
            .filter(**branch_filter_for_request(self.request))
        )
        start, end = date_window(self.request)
        if start:
            qs = qs.filter(produced_at__date__gte=start)
        if end:
            qs = qs.filter(produced_at__date__lte=end)
        return qs

    @extend_schema(request=ProductionInputSerializer, responses={201: ProductionBatchSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = ProductionInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        branch = data["branch"]
        if not has_access_to_branch(request.user, branch.pk):
            raise PermissionDenied(f"You are not assigned to {branch.name}.")

        try:
            batch = record_production(
                branch=branch,
                output_product=data["output_product"],
                quantity_produced=data["quantity_produced"],
                ingredients=data.get("ingredients"),
                recipe=data.get("recipe"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ProductionBatchSerializer(batch).data, status=status.HTTP_201_CREATED)
