# accounting/api/views/dashboard.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_window, report_branch_ids
from accounting.services.dashboard_service import get_dashboard_waterfall
from permissions.roles import CAP_REPORTS_VIEW, HasCapability


class DashboardView(APIView):
    """
    Revenue waterfall for the window (default: current month).

    Missing mapped accounts are reported in the body with a 200 so the
    dashboard can render an empty state.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(tags=["accounting"], responses={200: dict})
    def get(self, request):
        start, end = date_window(request)
        data = get_dashboard_waterfall(start_date=start, end_date=end, branch_ids=report_branch_ids(request))
        return Response(data, status=status.HTTP_200_OK)
