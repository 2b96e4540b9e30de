# accounting/api/views/trial_balance.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_param, report_branch_ids
from accounting.services.trial_balance_service import TrialBalanceService
from permissions.roles import CAP_ACCOUNTING_VIEW, HasCapability


class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="as_of", type=str, required=False, description="YYYY-MM-DD, inclusive"),
        ],
        responses={200: dict},
    )
    def get(self, request):
        as_of = date_param(request, "as_of", aliases=("as_of_date",))
        data = TrialBalanceService().generate(as_of=as_of, branch_ids=report_branch_ids(request))
        return Response(data, status=status.HTTP_200_OK)
