# inventory/views/analytics.py

"""
FOOD COST ANALYTICS

GET /api/inventory/analytics/food-cost/?start_date=&end_date=&branch_id=

Both dates are required.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_window, report_branch_ids
from inventory.services.exceptions import InventoryError
from inventory.services.food_cost_service import food_cost_analytics
from permissions.roles import CAP_REPORTS_VIEW, HasCapability


class FoodCostView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["inventory"],
        parameters=[
            OpenApiParameter(name="start_date", type=str, required=True, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", type=str, required=True, description="YYYY-MM-DD"),
            OpenApiParameter(name="branch_id", type=int, required=False),
        ],
        responses={200: dict, 400: dict},
    )
    def get(self, request):
        start, end = date_window(request)
        try:
            data = food_cost_analytics(start_date=start, end_date=end, branch_ids=report_branch_ids(request))
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(data, status=status.HTTP_200_OK)
