# accounting/api/views/balance_sheet.py

"""
PATH: accounting/api/views/balance_sheet.py

BALANCE SHEET API VIEW

GET /api/accounting/reports/balance-sheet/?as_of=YYYY-MM-DD

Respects the caller's branch selection. An unbalanced whole-business sheet
is a data integrity failure and is reported as 400.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_param, report_branch_ids
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.exceptions import AccountingServiceError
from permissions.roles import CAP_ACCOUNTING_VIEW, HasCapability


class BalanceSheetView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="as_of", type=str, required=False, description="YYYY-MM-DD, inclusive end of day"),
            OpenApiParameter(name="branch_id", type=int, required=False),
        ],
        responses={200: dict, 400: dict},
    )
    def get(self, request):
        as_of = date_param(request, "as_of", aliases=("as_of_date", "date"))

        try:
            data = generate_balance_sheet(as_of=as_of, branch_ids=report_branch_ids(request))
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(data, status=status.HTTP_200_OK)
