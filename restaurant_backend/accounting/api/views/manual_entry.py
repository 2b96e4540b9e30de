# accounting/api/views/manual_entry.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import JournalEntrySerializer, ManualEntrySerializer
from accounting.services.exceptions import AccountingServiceError
from accounting.services.manual_entry_service import post_manual_adjustment
from permissions.roles import CAP_ACCOUNTING_POST, HasCapability


class ManualEntryView(GenericAPIView):
    """Single-account adjustment offset against Opening Balance Equity."""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_POST
    serializer_class = ManualEntrySerializer

    @extend_schema(
        tags=["accounting"],
        request=ManualEntrySerializer,
        responses={201: JournalEntrySerializer, 400: dict},
    )
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = post_manual_adjustment(
                account=data["account"],
                amount=data["amount"],
                direction=data["type"],
                description=data["description"],
                branch=data.get("branch"),
                entry_date=data.get("entry_date"),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"success": True, "entry": JournalEntrySerializer(entry).data},
            status=status.HTTP_201_CREATED,
        )
