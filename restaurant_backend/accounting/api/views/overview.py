# accounting/api/views/overview.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_param, date_window, report_branch_ids
from accounting.services.overview_service import get_accounting_overview_kpis
from permissions.roles import CAP_ACCOUNTING_VIEW, HasCapability


class AccountingOverviewView(APIView):
    """KPI snapshot: balance sheet totals as of a date + P&L totals for a window."""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="as_of", type=str, required=False),
            OpenApiParameter(name="start_date", type=str, required=False),
            OpenApiParameter(name="end_date", type=str, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request):
        start, end = date_window(request)
        data = get_accounting_overview_kpis(
            as_of=date_param(request, "as_of", aliases=("as_of_date",)),
            start_date=start,
            end_date=end,
            branch_ids=report_branch_ids(request),
        )
        return Response(data, status=status.HTTP_200_OK)
