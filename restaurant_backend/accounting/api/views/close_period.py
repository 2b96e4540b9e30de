# accounting/api/views/close_period.py

"""
PATH: accounting/api/views/close_period.py

PERIOD CLOSE API

GET  /api/accounting/close-period/   closed periods, newest first
POST /api/accounting/close-period/   close [start_date, end_date] into retained earnings
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import ClosePeriodSerializer, PeriodCloseSerializer
from accounting.models.period_close import PeriodClose
from accounting.services.account_resolver import get_active_chart
from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import to_major_number
from accounting.services.period_close_service import close_period
from permissions.roles import CAP_ACCOUNTING_CLOSE, CAP_ACCOUNTING_VIEW, HasCapability


class ClosePeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {"GET": CAP_ACCOUNTING_VIEW, "POST": CAP_ACCOUNTING_CLOSE}
    serializer_class = ClosePeriodSerializer

    @extend_schema(tags=["accounting"], responses=PeriodCloseSerializer(many=True))
    def get(self, request, *args, **kwargs):
        qs = PeriodClose.objects.filter(chart=get_active_chart()).order_by("-end_date")
        return Response(PeriodCloseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=ClosePeriodSerializer,
        responses={201: dict, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = close_period(
                start_date=data["start_date"],
                end_date=data["end_date"],
                user=request.user,
            )
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        je = result.journal_entry

        return Response(
            {
                "period_close": PeriodCloseSerializer(result.period_close).data,
                "journal_entry": {
                    "id": je.id,
                    "description": je.description,
                    "reference": je.reference,
                    "posted_at": je.posted_at.isoformat(),
                },
                "summary": {
                    "total_revenue": to_major_number(result.total_revenue),
                    "total_expenses": to_major_number(result.total_expenses),
                    "net_profit": to_major_number(result.net_profit),
                },
            },
            status=status.HTTP_201_CREATED,
        )
