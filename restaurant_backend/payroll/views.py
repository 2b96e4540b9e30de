# payroll/views.py

"""
PAYROLL ENDPOINTS

GET  /api/payroll/transactions/                 list (?status, ?gl_status, ?employee)
POST /api/payroll/transactions/                 initiate (PENDING)
POST /api/payroll/transactions/<id>/approve/
POST /api/payroll/transactions/<id>/reject/
POST /api/payroll/transactions/<id>/mark-paid/  Dr Salaries Payable / Cr Bank
POST /api/payroll/transactions/<id>/mark-failed/
POST /api/payroll/post-gl/                      {"payroll_ids": [...]}

Employees without payroll.manage see only their own rows.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import to_major_number
from payroll.models import PayrollTransaction
from payroll.serializers import (
    PayrollFailSerializer,
    PayrollInitiateSerializer,
    PayrollPostSerializer,
    PayrollRejectSerializer,
    PayrollTransactionSerializer,
)
from payroll.services.payroll_service import (
    PayrollError,
    approve_payroll,
    initiate_payroll,
    mark_failed,
    mark_paid,
    post_payroll_to_gl,
    reject_payroll,
)
from permissions.roles import CAP_PAYROLL_MANAGE, HasCapability, user_has_capability

DOMAIN_ERRORS = (PayrollError, AccountingServiceError)


def _error(exc) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(tags=["payroll"])
class PayrollTransactionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = PayrollTransactionSerializer
    filterset_fields = ["status", "gl_status", "employee"]

    def get_queryset(self):
        qs = PayrollTransaction.objects.select_related("employee").order_by("-created_at")
        if not user_has_capability(self.request.user, CAP_PAYROLL_MANAGE):
            return qs.filter(employee=self.request.user)
        return qs

    def _require_manager(self, request):
        if not user_has_capability(request.user, CAP_PAYROLL_MANAGE):
            raise PermissionDenied("You do not have permission to manage payroll.")

    def _run(self, fn, *args, **kwargs):
        try:
            row = fn(*args, **kwargs)
        except DOMAIN_ERRORS as exc:
            return _error(exc)
        return Response(PayrollTransactionSerializer(row).data, status=status.HTTP_200_OK)

    @extend_schema(request=PayrollInitiateSerializer, responses={201: PayrollTransactionSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        self._require_manager(request)
        s = PayrollInitiateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            row = initiate_payroll(user=request.user, **s.validated_data)
        except PayrollError as exc:
            return _error(exc)

        return Response(PayrollTransactionSerializer(row).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PayrollTransactionSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        self._require_manager(request)
        return self._run(approve_payroll, self.get_object(), user=request.user)

    @extend_schema(request=PayrollRejectSerializer, responses={200: PayrollTransactionSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        self._require_manager(request)
        s = PayrollRejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._run(reject_payroll, self.get_object(), user=request.user, reason=s.validated_data["reason"])

    @extend_schema(request=None, responses={200: PayrollTransactionSerializer, 400: dict})
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        self._require_manager(request)
        return self._run(mark_paid, self.get_object(), user=request.user)

    @extend_schema(request=PayrollFailSerializer, responses={200: PayrollTransactionSerializer, 400: dict})
    @action(detail=True, methods=["post"], url_path="mark-failed")
    def mark_failed(self, request, pk=None):
        self._require_manager(request)
        s = PayrollFailSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._run(mark_failed, self.get_object(), user=request.user, error=s.validated_data["error"])


class PayrollPostGLView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYROLL_MANAGE

    @extend_schema(tags=["payroll"], request=PayrollPostSerializer, responses={200: dict, 400: dict})
    def post(self, request):
        s = PayrollPostSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = post_payroll_to_gl(s.validated_data["payroll_ids"], user=request.user)
        except DOMAIN_ERRORS as exc:
            return _error(exc)

        return Response(
            {
                "success": True,
                "journal_entry_id": result.journal_entry.id,
                "posted_count": result.posted_count,
                "total_amount": to_major_number(result.total_amount),
            },
            status=status.HTTP_200_OK,
        )
