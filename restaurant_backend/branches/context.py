# branches/context.py

"""
======================================================
PATH: branches/context.py
======================================================
BRANCH CONTEXT

Every list/report endpoint is filtered by the branches the caller has selected.

Selection source (first match wins):
- `selectedBranches` cookie: URL-encoded JSON list, e.g. ["1","3"] or ["all"]
- `X-Branch-Ids` header: comma separated ids, or "all"
- default: ["all"]

Visibility rule:
- Admins / superusers see whatever they select.
- Everyone else is clamped to the branches they are assigned to, even when
  they select "all".
"""

from __future__ import annotations

import json
import logging
from urllib.parse import unquote

from django.conf import settings

from permissions.roles import ROLE_ADMIN

logger = logging.getLogger(__name__)

ALL_BRANCHES = "all"
BRANCH_HEADER = "HTTP_X_BRANCH_IDS"


def _cookie_name() -> str:
    return getattr(settings, "BRANCH_COOKIE_NAME", "selectedBranches")


def _normalize(values) -> list[str]:
    out: list[str] = []
    for v in values or []:
        s = str(v).strip()
        if s and s not in out:
            out.append(s)
    return out


def parse_branch_selection(raw: str | None) -> list[str]:
    """
    Parse a cookie value into a list of branch ids.

    Malformed values fall back to ["all"] (logged, never raised).
    """
    if not raw:
        return [ALL_BRANCHES]

    try:
        parsed = json.loads(unquote(raw))
    except (ValueError, TypeError):
        logger.warning("Ignoring malformed branch selection cookie: %r", raw)
        return [ALL_BRANCHES]

    if isinstance(parsed, (str, int)):
        parsed = [parsed]

    if not isinstance(parsed, list):
        logger.warning("Ignoring non-list branch selection cookie: %r", raw)
        return [ALL_BRANCHES]

    return _normalize(parsed) or [ALL_BRANCHES]


def get_selected_branches(request) -> list[str]:
    raw_cookie = request.COOKIES.get(_cookie_name())
    if raw_cookie:
        return parse_branch_selection(raw_cookie)

    raw_header = (request.META.get(BRANCH_HEADER) or "").strip()
    if raw_header:
        return _normalize(raw_header.split(",")) or [ALL_BRANCHES]

    return [ALL_BRANCHES]


def is_unrestricted(user) -> bool:
    return bool(
        user
        and getattr(user, "is_authenticated", False)
        and (getattr(user, "is_superuser", False) or getattr(user, "role", None) == ROLE_ADMIN)
    )


def assigned_branch_ids(user) -> set[int]:
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    ids = set(user.branches.values_list("id", flat=True))
    if getattr(user, "default_branch_id", None):
        ids.add(user.default_branch_id)
    return ids


def has_access_to_branch(user, branch_id) -> bool:
    if is_unrestricted(user):
        return True
    try:
        return int(branch_id) in assigned_branch_ids(user)
    except (TypeError, ValueError):
        return False


def build_branch_filter(selected: list[str], field: str = "branch_id") -> dict:
    """
    Translate a selection into ORM filter kwargs.

    ["all"] or an empty list means no filter. Non-numeric ids are dropped.
    """
    if not selected or ALL_BRANCHES in selected:
        return {}

    ids = []
    for value in selected:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue

    return {f"{field}__in": ids}


def resolve_branch_ids(request) -> list[int] | None:
    """
    Effective branch ids for this request.

    Returns None when the caller may see every branch, otherwise a (possibly
    empty) list of ids.
    """
    selected = get_selected_branches(request)
    user = getattr(request, "user", None)

    branch_filter = build_branch_filter(selected)
    requested = branch_filter.get("branch_id__in")

    if is_unrestricted(user):
        return requested

    allowed = assigned_branch_ids(user)
    if requested is None:
        return sorted(allowed)
    return [b for b in requested if b in allowed]


def branch_filter_for_request(request, field: str = "branch_id") -> dict:
    ids = resolve_branch_ids(request)
    if ids is None:
        return {}
    return {f"{field}__in": ids}
