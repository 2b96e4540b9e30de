# accounting/api/view.py

"""
PATH: accounting/api/view.py

JOURNAL + LEDGER VIEWSETS

GET  /api/accounting/journal-entries/              list (branch selection, ?start_date, ?end_date, ?source_type)
POST /api/accounting/journal-entries/              create a balanced entry through the engine
GET  /api/accounting/journal-entries/<id>/         entry + lines
POST /api/accounting/journal-entries/<id>/reverse/ post the mirror entry
GET  /api/accounting/ledger-entries/               read-only lines (?journal_entry, ?account, ?entry_type)

Journal entries are never edited or deleted; a mistake is undone by a
reversal.
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_window, report_branch_ids
from accounting.api.serializers import (
    JournalEntryCreateSerializer,
    JournalEntrySerializer,
    LedgerEntrySerializer,
    ReverseEntrySerializer,
)
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import AccountingServiceError, UnbalancedEntryError
from accounting.services.journal_entry_service import create_journal_entry, reverse_journal_entry
from accounting.services.money import end_of_day_exclusive, start_of_day, to_major_number
from permissions.roles import CAP_ACCOUNTING_POST, CAP_ACCOUNTING_VIEW, HasCapability


def _service_error_response(exc: AccountingServiceError) -> Response:
    payload = {"detail": str(exc)}
    if isinstance(exc, UnbalancedEntryError):
        payload["debits"] = to_major_number(exc.debits)
        payload["credits"] = to_major_number(exc.credits)
    return Response(payload, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, required=False, description="YYYY-MM-DD (inclusive)"),
        OpenApiParameter(name="end_date", type=str, required=False, description="YYYY-MM-DD (inclusive)"),
        OpenApiParameter(name="source_type", type=str, required=False),
    ],
)
class JournalEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capabilities = {"GET": CAP_ACCOUNTING_VIEW, "POST": CAP_ACCOUNTING_POST}
    serializer_class = JournalEntrySerializer

    def get_queryset(self):
        qs = (
            JournalEntry.objects.select_related("branch", "created_by")
            .prefetch_related("ledger_entries__account")
            .order_by("-posted_at", "-id")
        )

        branch_ids = report_branch_ids(self.request)
        if branch_ids is not None:
            qs = qs.filter(
                Q(branch_id__in=branch_ids) | Q(ledger_entries__branch_id__in=branch_ids)
            ).distinct()

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(posted_at__gte=start_of_day(start))
        if end:
            qs = qs.filter(posted_at__lt=end_of_day_exclusive(end))

        source_type = (self.request.query_params.get("source_type") or "").strip().upper()
        if source_type:
            qs = qs.filter(source_type=source_type)

        return qs

    @extend_schema(request=JournalEntryCreateSerializer, responses={201: JournalEntrySerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        s = JournalEntryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        reference = (data.get("reference") or "").strip()

        try:
            entry = create_journal_entry(
                description=data["description"],
                postings=[
                    {
                        "account": line["account"],
                        "debit": line.get("debit"),
                        "credit": line.get("credit"),
                        "branch": line.get("branch"),
                        "memo": line.get("memo", ""),
                    }
                    for line in data["lines"]
                ],
                reference_type="MANUAL" if reference else None,
                reference_id=reference or None,
                posted_at=data.get("posted_at"),
                branch=data.get("branch"),
                source_type=JournalEntry.SourceType.MANUAL,
                user=request.user,
            )
        except AccountingServiceError as exc:
            return _service_error_response(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ReverseEntrySerializer, responses={201: JournalEntrySerializer, 400: dict})
    @action(detail=True, methods=["post"], url_path="reverse")
    def reverse_entry(self, request, pk=None):
        entry = self.get_object()

        s = ReverseEntrySerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            reversal = reverse_journal_entry(entry, reason=s.validated_data["reason"], user=request.user)
        except AccountingServiceError as exc:
            return _service_error_response(exc)

        return Response(JournalEntrySerializer(reversal).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="journal_entry", type=int, required=False),
        OpenApiParameter(name="account", type=int, required=False),
        OpenApiParameter(name="entry_type", type=str, required=False),
    ],
)
class LedgerEntryViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only access to ledger lines (append-only, audit-safe).
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ACCOUNTING_VIEW
    serializer_class = LedgerEntrySerializer
    filterset_fields = ["journal_entry", "account", "entry_type"]

    def get_queryset(self):
        qs = LedgerEntry.objects.select_related("journal_entry", "account").order_by("-created_at", "-id")
        branch_ids = report_branch_ids(self.request)
        if branch_ids is not None:
            qs = qs.filter(branch_id__in=branch_ids)
        return qs
