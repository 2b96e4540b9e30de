# accounting/api/views/vendors.py

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets

from accounting.api.serializers import VendorSerializer
from accounting.models.vendor import Vendor
from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability
from rest_framework.permissions import IsAuthenticated


@extend_schema(tags=["accounting"])
class VendorViewSet(viewsets.ModelViewSet):
    """Suppliers. Vendors are deactivated (PATCH is_active=false), not deleted."""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_EDIT,
        "PATCH": CAP_INVENTORY_EDIT,
    }
    serializer_class = VendorSerializer
    http_method_names = ["get", "post", "patch", "head", "options"]
    filterset_fields = ["is_active"]
    queryset = Vendor.objects.all().order_by("name")
