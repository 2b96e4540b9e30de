# branches/views.py

"""
PATH: branches/views.py

BRANCH ENDPOINTS

GET/POST   /api/branches/            list (visible branches) / create (admin)
PATCH      /api/branches/<id>/       update (admin)
POST       /api/branches/select/     store the caller's branch selection cookie
"""

from __future__ import annotations

import json

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response

from branches.context import (
    ALL_BRANCHES,
    assigned_branch_ids,
    get_selected_branches,
    has_access_to_branch,
    is_unrestricted,
)
from branches.models import Branch
from branches.serializers import BranchSerializer, SelectBranchesSerializer
from permissions.roles import IsAdmin

SELECTION_MAX_AGE = 7 * 24 * 60 * 60


class BranchViewSet(viewsets.ModelViewSet):
    serializer_class = BranchSerializer
    http_method_names = ["get", "post", "patch", "head", "options"]
    filterset_fields = ["branch_type", "is_active"]

    def get_permissions(self):
        if self.request.method in SAFE_METHODS or self.action == "select":
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def get_queryset(self):
        qs = Branch.objects.all().order_by("name")
        user = self.request.user
        if is_unrestricted(user):
            return qs
        return qs.filter(id__in=assigned_branch_ids(user))

    @extend_schema(request=SelectBranchesSerializer, responses={200: dict, 403: dict})
    @action(detail=False, methods=["post", "get"], url_path="select")
    def select(self, request):
        if request.method == "GET":
            return Response({"branch_ids": get_selected_branches(request)})

        s = SelectBranchesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        ids = [str(v).strip() for v in s.validated_data["branch_ids"]]

        if ALL_BRANCHES in ids:
            ids = [ALL_BRANCHES]
        else:
            denied = [b for b in ids if not has_access_to_branch(request.user, b)]
            if denied:
                return Response(
                    {"detail": f"Access denied to branch(es): {', '.join(denied)}"},
                    status=status.HTTP_403_FORBIDDEN,
                )

        response = Response({"branch_ids": ids}, status=status.HTTP_200_OK)
        response.set_cookie(
            getattr(settings, "BRANCH_COOKIE_NAME", "selectedBranches"),
            json.dumps(ids),
            max_age=SELECTION_MAX_AGE,
            httponly=True,
            samesite="Lax",
            secure=not settings.DEBUG and not getattr(settings, "TESTING", False),
        )
        return response
