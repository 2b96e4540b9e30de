# recipes/views/sales.py

"""
POS SALES IMPORT ENDPOINTS

POST /api/recipes/sales-import/   multipart: file, execute=true|false, branch_id
     execute=false -> 200 analysis only (nothing written)
     execute=true  -> 201 SalesReport + stock deductions
GET  /api/recipes/sales-reports/  history (branch selection, ?start_date, ?end_date)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.params import date_window
from accounting.services.money import to_major_number
from branches.context import branch_filter_for_request, has_access_to_branch
from inventory.services.exceptions import InventoryError
from permissions.roles import CAP_INVENTORY_VIEW, CAP_SALES_IMPORT, HasCapability
from recipes.models import SalesReport
from recipes.serializers import SalesImportSerializer, SalesReportSerializer
from recipes.services.sales_import import SalesImportError, analyze_sales_file, execute_sales_import


class SalesImportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SALES_IMPORT
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        tags=["recipes"],
        request={"multipart/form-data": SalesImportSerializer},
        responses={200: dict, 201: dict, 400: dict},
    )
    def post(self, request):
        s = SalesImportSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        upload = data["file"]

        try:
            analysis = analyze_sales_file(upload)
        except SalesImportError as exc:
            return Response({"detail": str(exc), "details": exc.details}, status=status.HTTP_400_BAD_REQUEST)

        payload = analysis.as_dict()

        if not data.get("execute"):
            return Response({"executed": False, **payload}, status=status.HTTP_200_OK)

        branch = data["branch"]
        if not has_access_to_branch(request.user, branch.pk):
            raise PermissionDenied(f"You are not assigned to {branch.name}.")

        try:
            report = execute_sales_import(analysis, branch=branch, user=request.user, file_name=upload.name)
        except (SalesImportError, InventoryError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "executed": True,
                "report_id": report.id,
                "status": report.status,
                "cogs": to_major_number(report.total_cogs),
                "message": f"Executed deductions successfully. Date used: {report.report_date.isoformat()}",
                **payload,
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["recipes"])
class SalesReportViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = SalesReportSerializer
    filterset_fields = ["status"]

    def get_queryset(self):
        qs = SalesReport.objects.select_related("branch").order_by("-report_date", "-uploaded_at")
        qs = qs.filter(**branch_filter_for_request(self.request))

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(report_date__gte=start)
        if end:
            qs = qs.filter(report_date__lte=end)
        return qs
