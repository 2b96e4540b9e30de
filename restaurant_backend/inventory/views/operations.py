# inventory/views/operations.py

"""
STOCK WORKFLOW ENDPOINTS

/api/inventory/purchases/              list, create (optionally receive at once)
/api/inventory/purchases/<id>/receive/ DRAFT -> RECEIVED
/api/inventory/waste/                  list, create
/api/inventory/waste/summary/          totals by reason / product / day
/api/inventory/transfers/              list (?status), create
/api/inventory/transfers/<id>/send|receive|cancel/
/api/inventory/stock-counts/           list, retrieve, submit

Domain failures (stock, state, ledger posting) are 400 {"detail": ...}.
"""

from django.db import transaction
from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_window
from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import end_of_day_exclusive, start_of_day
from branches.context import branch_filter_for_request, has_access_to_branch, resolve_branch_ids
from inventory.models import PurchaseInvoice, StockCount, TransferRequest, WasteLog
from inventory.serializers import (
    PurchaseInvoiceCreateSerializer,
    PurchaseInvoiceSerializer,
    StockCountCreateSerializer,
    StockCountSerializer,
    TransferCreateSerializer,
    TransferRequestSerializer,
    WasteCreateSerializer,
    WasteLogSerializer,
)
from inventory.services.exceptions import InventoryError
from inventory.services.purchasing_service import create_purchase_invoice, receive_purchase_invoice
from inventory.services.stock_count_service import submit_stock_count
from inventory.services.transfer_service import cancel_transfer, create_transfer, receive_transfer, send_transfer
from inventory.services.waste_service import record_waste, waste_summary
from permissions.roles import CAP_INVENTORY_ADJUST, CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability

DOMAIN_ERRORS = (InventoryError, AccountingServiceError)


def _error(exc) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _require_branch(request, branch) -> None:
    if not has_access_to_branch(request.user, branch.pk):
        raise PermissionDenied(f"You are not assigned to {branch.name}.")


def _window(qs, request, field: str):
    start, end = date_window(request)
    if start:
        qs = qs.filter(**{f"{field}__gte": start_of_day(start)})
    if end:
        qs = qs.filter(**{f"{field}__lt": end_of_day_exclusive(end)})
    return qs


# ------------------------------------------------------------
# PURCHASES
# ------------------------------------------------------------


@extend_schema(tags=["inventory"])
class PurchaseInvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_EDIT,
    }
    serializer_class = PurchaseInvoiceSerializer
    filterset_fields = ["status", "vendor"]

    def base_queryset(self):
        return (
            PurchaseInvoice.objects.select_related("vendor", "branch")
            .prefetch_related("items__product")
            .order_by("-invoice_date", "-created_at")
        )

    def get_queryset(self):
        return self.base_queryset().filter(**branch_filter_for_request(self.request))

    @extend_schema(request=PurchaseInvoiceCreateSerializer, responses={201: PurchaseInvoiceSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = PurchaseInvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        _require_branch(request, data["branch"])

        try:
            with transaction.atomic():
                invoice = create_purchase_invoice(
                    vendor=data["vendor"],
                    branch=data["branch"],
                    invoice_number=data["invoice_number"],
                    invoice_date=data.get("invoice_date"),
                    notes=data.get("notes", ""),
                    items=data["items"],
                    user=request.user,
                )
                if data.get("receive"):
                    invoice = receive_purchase_invoice(invoice, user=request.user).invoice
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        invoice = self.base_queryset().get(pk=invoice.pk)
        return Response(PurchaseInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PurchaseInvoiceSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def receive(self, request, pk=None):
        invoice = self.get_object()
        _require_branch(request, invoice.branch)

        try:
            receive_purchase_invoice(invoice, user=request.user)
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        invoice = self.base_queryset().get(pk=invoice.pk)
        return Response(PurchaseInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


# ------------------------------------------------------------
# WASTE
# ------------------------------------------------------------


@extend_schema(
    tags=["inventory"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, required=False),
        OpenApiParameter(name="end_date", type=str, required=False),
    ],
)
class WasteLogViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_ADJUST,
    }
    serializer_class = WasteLogSerializer
    filterset_fields = ["reason", "product"]

    def get_queryset(self):
        qs = WasteLog.objects.select_related("product", "branch").order_by("-occurred_at", "-id")
        qs = qs.filter(**branch_filter_for_request(self.request))
        return _window(qs, self.request, "occurred_at")

    @extend_schema(request=WasteCreateSerializer, responses={201: WasteLogSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = WasteCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        _require_branch(request, data["branch"])

        try:
            log = record_waste(user=request.user, **data)
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        return Response(WasteLogSerializer(log).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"])
    def summary(self, request):
        start, end = date_window(request)
        return Response(
            waste_summary(start_date=start, end_date=end, branch_ids=resolve_branch_ids(request))
        )


# ------------------------------------------------------------
# TRANSFERS
# ------------------------------------------------------------


@extend_schema(tags=["inventory"])
class TransferRequestViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_ADJUST,
    }
    serializer_class = TransferRequestSerializer
    filterset_fields = ["status"]

    def base_queryset(self):
        return (
            TransferRequest.objects.select_related("from_branch", "to_branch")
            .prefetch_related("items__product")
            .order_by("-created_at")
        )

    def get_queryset(self):
        qs = self.base_queryset()
        ids = resolve_branch_ids(self.request)
        if ids is not None:
            qs = qs.filter(Q(from_branch_id__in=ids) | Q(to_branch_id__in=ids))
        return qs

    def _respond(self, transfer, code=status.HTTP_200_OK):
        transfer = self.base_queryset().get(pk=transfer.pk)
        return Response(TransferRequestSerializer(transfer).data, status=code)

    @extend_schema(request=TransferCreateSerializer, responses={201: TransferRequestSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = TransferCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        if not (
            has_access_to_branch(request.user, data["from_branch"].pk)
            or has_access_to_branch(request.user, data["to_branch"].pk)
        ):
            raise PermissionDenied("You are not assigned to either branch.")

        try:
            transfer = create_transfer(user=request.user, **data)
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        return self._respond(transfer, status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: TransferRequestSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def send(self, request, pk=None):
        transfer = self.get_object()
        _require_branch(request, transfer.from_branch)
        try:
            transfer = send_transfer(transfer, user=request.user)
        except DOMAIN_ERRORS as exc:
            return _error(exc)
        return self._respond(transfer)

    @extend_schema(request=None, responses={200: TransferRequestSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def receive(self, request, pk=None):
        transfer = self.get_object()
        _require_branch(request, transfer.to_branch)
        try:
            transfer = receive_transfer(transfer, user=request.user)
        except DOMAIN_ERRORS as exc:
            return _error(exc)
        return self._respond(transfer)

    @extend_schema(request=None, responses={200: TransferRequestSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        transfer = self.get_object()
        _require_branch(request, transfer.from_branch)
        try:
            transfer = cancel_transfer(transfer, user=request.user)
        except DOMAIN_ERRORS as exc:
            return _error(exc)
        return self._respond(transfer)


# ------------------------------------------------------------
# STOCK COUNTS
# ------------------------------------------------------------


@extend_schema(tags=["inventory"])
class StockCountViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_INVENTORY_VIEW,
        "POST": CAP_INVENTORY_ADJUST,
    }
    serializer_class = StockCountSerializer

    def get_queryset(self):
        qs = StockCount.objects.select_related("branch").prefetch_related("lines__product").order_by("-counted_at", "-id")
        qs = qs.filter(**branch_filter_for_request(self.request))
        return _window(qs, self.request, "counted_at")

    @extend_schema(request=StockCountCreateSerializer, responses={201: dict, 400: dict})
    def create(self, request, *args, **kwargs):
        s = StockCountCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        _require_branch(request, data["branch"])

        try:
            result = submit_stock_count(
                branch=data["branch"],
                counts=data["items"],
                user=request.user,
                notes=data.get("notes", ""),
            )
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        count = StockCount.objects.select_related("branch").prefetch_related("lines__product").get(pk=result.stock_count.pk)
        return Response(
            {
                "stock_count": StockCountSerializer(count).data,
                "processed": result.lines_adjusted,
                "lines_counted": result.lines_counted,
            },
            status=status.HTTP_201_CREATED,
        )
