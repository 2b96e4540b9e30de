# accounting/api/params.py

"""
Query-param helpers shared by the accounting report views.
"""

from __future__ import annotations

from datetime import date

from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from branches.context import resolve_branch_ids


def date_param(request, name: str, *, aliases: tuple[str, ...] = ()) -> date | None:
    for key in (name, *aliases):
        raw = (request.query_params.get(key) or "").strip()
        if not raw:
            continue
        parsed = parse_date(raw[:10])
        if parsed is None:
            raise ValidationError({name: f"Invalid {name} (expected YYYY-MM-DD)"})
        return parsed
    return None


def date_window(request) -> tuple[date | None, date | None]:
    start = date_param(request, "start_date", aliases=("from", "startDate"))
    end = date_param(request, "end_date", aliases=("to", "endDate"))
    if start and end and start > end:
        raise ValidationError({"detail": "start_date cannot be after end_date"})
    return start, end


def report_branch_ids(request) -> list[int] | None:
    """
    Branch slice for a report.

    An explicit ?branch_id= narrows the cookie/header selection; callers can
    never widen it beyond the branches they may see.
    """
    ids = resolve_branch_ids(request)
    explicit = (request.query_params.get("branch_id") or request.query_params.get("branchId") or "").strip()
    if not explicit:
        return ids

    try:
        branch_id = int(explicit)
    except ValueError as exc:
        raise ValidationError({"branch_id": "branch_id must be an integer"}) from exc

    if ids is not None and branch_id not in ids:
        return []
    return [branch_id]
