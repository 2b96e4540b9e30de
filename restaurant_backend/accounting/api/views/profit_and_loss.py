# accounting/api/views/profit_and_loss.py

"""
PATH: accounting/api/views/profit_and_loss.py

PROFIT & LOSS API VIEW

GET /api/accounting/reports/pl/?start_date=&end_date=

Both bounds are optional whole days; the caller's branch selection applies.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_window, report_branch_ids
from accounting.services.profit_and_loss_service import get_profit_and_loss
from permissions.roles import CAP_ACCOUNTING_VIEW, HasCapability


class ProfitAndLossView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="start_date", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="branch_id", type=int, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request):
        start, end = date_window(request)
        data = get_profit_and_loss(start_date=start, end_date=end, branch_ids=report_branch_ids(request))
        return Response(data, status=status.HTTP_200_OK)
