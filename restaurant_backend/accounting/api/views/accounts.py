# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API (ACTIVE CHART)

GET/POST          /api/accounting/accounts/
GET/PATCH/DELETE  /api/accounting/accounts/<id>/
GET/PUT           /api/accounting/settings/     event -> account mappings

Accounts with ledger history cannot be deleted (400); deactivate them instead.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import AccountSerializer, MappingUpdateSerializer
from accounting.models.account import Account
from accounting.services.account_resolver import get_active_chart
from accounting.services.exceptions import AccountingServiceError
from accounting.services.mapping_service import describe_mappings, update_mappings
from permissions.roles import CAP_ACCOUNTING_SETUP, CAP_ACCOUNTING_VIEW, HasCapability

_SETUP_METHODS = {
    "GET": CAP_ACCOUNTING_VIEW,
    "POST": CAP_ACCOUNTING_SETUP,
    "PUT": CAP_ACCOUNTING_SETUP,
    "PATCH": CAP_ACCOUNTING_SETUP,
    "DELETE": CAP_ACCOUNTING_SETUP,
}


@extend_schema(tags=["accounting"])
class AccountViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = _SETUP_METHODS
    serializer_class = AccountSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filterset_fields = ["account_type", "is_active"]
    pagination_class = None

    def get_queryset(self):
        return Account.objects.filter(chart=get_active_chart()).order_by("code")

    def destroy(self, request, *args, **kwargs):
        account = self.get_object()
        try:
            account.delete()
        except DjangoValidationError as exc:
            return Response({"detail": " ".join(exc.messages)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccountingSettingsView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = _SETUP_METHODS
    serializer_class = MappingUpdateSerializer

    @extend_schema(tags=["accounting"], responses={200: dict})
    def get(self, request):
        chart = get_active_chart()
        accounts = Account.objects.filter(chart=chart).order_by("code")
        return Response(
            {
                "chart": {"id": chart.id, "name": chart.name, "code": chart.code},
                "mappings": describe_mappings(),
                "accounts": AccountSerializer(accounts, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["accounting"], request=MappingUpdateSerializer, responses={200: dict, 400: dict})
    def put(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            updated = update_mappings(s.validated_data["mappings"])
        except (AccountingServiceError, DjangoValidationError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"success": True, "updated": updated}, status=status.HTTP_200_OK)
