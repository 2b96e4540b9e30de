# accounting/api/views/variance.py

"""
PATH: accounting/api/views/variance.py

THEORETICAL vs ACTUAL VARIANCE

GET /api/accounting/variance/?from=&to=&branch_id=&tolerance_pct=&tolerance_abs=

Defaults: current month, tolerances from settings.
"""

from decimal import Decimal, InvalidOperation

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_window, report_branch_ids
from accounting.services.money import month_bounds
from accounting.services.variance_service import compute_variance
from permissions.roles import CAP_REPORTS_VIEW, HasCapability


def _decimal_param(request, name: str):
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a number") from exc


class VarianceView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="from", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="to", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="branch_id", type=int, required=False),
            OpenApiParameter(name="tolerance_pct", type=float, required=False),
            OpenApiParameter(name="tolerance_abs", type=float, required=False),
        ],
        responses={200: dict, 400: dict},
    )
    def get(self, request):
        start, end = date_window(request)
        month_start, month_end = month_bounds()

        try:
            data = compute_variance(
                start_date=start or month_start,
                end_date=end or month_end,
                branch_ids=report_branch_ids(request),
                tolerance_pct=_decimal_param(request, "tolerance_pct"),
                tolerance_abs=_decimal_param(request, "tolerance_abs"),
            )
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(data, status=status.HTTP_200_OK)
