# accounting/api/views/expenses.py

"""
PATH: accounting/api/views/expenses.py

EXPENSE CLAIMS API

GET  /api/accounting/expenses/               own claims, or every claim for reviewers
POST /api/accounting/expenses/               submit (any staff member)
POST /api/accounting/expenses/<id>/approve/  post to ledger (reviewers)
POST /api/accounting/expenses/<id>/reject/
GET/POST/PATCH /api/accounting/expense-categories/
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_window
from accounting.api.serializers import (
    ExpenseApproveSerializer,
    ExpenseCategorySerializer,
    ExpenseRejectSerializer,
    ExpenseSerializer,
    ExpenseSubmitSerializer,
)
from accounting.models.expense import Expense, ExpenseCategory
from accounting.services.exceptions import AccountingServiceError
from accounting.services.expense_service import approve_expense, reject_expense, submit_expense
from branches.context import branch_filter_for_request, has_access_to_branch
from permissions.roles import (
    CAP_ACCOUNTING_POST,
    CAP_ACCOUNTING_SETUP,
    CAP_ACCOUNTING_VIEW,
    CAP_EXPENSE_SUBMIT,
    HasCapability,
    user_has_capability,
)


@extend_schema(
    tags=["expenses"],
    parameters=[
        OpenApiParameter(name="status", type=str, required=False),
        OpenApiParameter(name="start_date", type=str, required=False),
        OpenApiParameter(name="end_date", type=str, required=False),
    ],
)
class ExpenseViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_EXPENSE_SUBMIT
    serializer_class = ExpenseSerializer
    filterset_fields = ["status", "category", "submitted_by"]

    def get_queryset(self):
        qs = Expense.objects.select_related(
            "submitted_by", "category", "debit_account", "credit_account"
        ).order_by("-expense_date", "-created_at")

        if not user_has_capability(self.request.user, CAP_ACCOUNTING_VIEW):
            return qs.filter(submitted_by=self.request.user)

        qs = qs.filter(**branch_filter_for_request(self.request))

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(expense_date__gte=start)
        if end:
            qs = qs.filter(expense_date__lte=end)
        return qs

    @extend_schema(request=ExpenseSubmitSerializer, responses={201: ExpenseSerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = ExpenseSubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        branch = data.get("branch") or request.user.default_branch
        if branch is not None and not has_access_to_branch(request.user, branch.id):
            raise PermissionDenied("You are not assigned to this branch.")

        try:
            expense = submit_expense(submitted_by=request.user, branch=branch, **{k: v for k, v in data.items() if k != "branch"})
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    def _require_reviewer(self, request):
        if not user_has_capability(request.user, CAP_ACCOUNTING_POST):
            raise PermissionDenied("You do not have permission to review expenses.")

    @extend_schema(request=ExpenseApproveSerializer, responses={200: dict, 400: dict})
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        self._require_reviewer(request)
        expense = self.get_object()

        s = ExpenseApproveSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = approve_expense(
                expense,
                reviewer=request.user,
                debit_account=s.validated_data.get("debit_account"),
                credit_account=s.validated_data.get("credit_account"),
            )
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"expense": ExpenseSerializer(result.expense).data, "journal_entry_id": result.journal_entry.id},
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=ExpenseRejectSerializer, responses={200: ExpenseSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        self._require_reviewer(request)
        expense = self.get_object()

        s = ExpenseRejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            expense = reject_expense(expense, reviewer=request.user, reason=s.validated_data["reason"])
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)


@extend_schema(tags=["expenses"])
class ExpenseCategoryViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {
        "GET": CAP_EXPENSE_SUBMIT,
        "POST": CAP_ACCOUNTING_SETUP,
        "PATCH": CAP_ACCOUNTING_SETUP,
    }
    serializer_class = ExpenseCategorySerializer
    http_method_names = ["get", "post", "patch", "head", "options"]
    pagination_class = None
    queryset = ExpenseCategory.objects.select_related("debit_account", "credit_account").order_by("name")
