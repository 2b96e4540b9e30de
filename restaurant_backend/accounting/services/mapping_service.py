# accounting/services/mapping_service.py

"""
EVENT -> ACCOUNT MAPPING SETTINGS

Read and bulk-update the AccountingMapping rows of the active chart.
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.account import Account
from accounting.models.mapping import AccountingMapping
from accounting.services.account_resolver import (
    DEFAULT_EVENT_CODES,
    EVENT_KEYS,
    get_active_chart,
    try_resolve_account,
)
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)


def describe_mappings() -> list[dict]:
    """Every known event key with its effective account and whether it is overridden."""
    chart = get_active_chart()
    overrides = {
        m.event_key: m
        for m in AccountingMapping.objects.filter(chart=chart).select_related("account")
    }

    keys = sorted(set(EVENT_KEYS) | set(overrides))
    out = []
    for key in keys:
        account = try_resolve_account(key, chart=chart)
        out.append(
            {
                "event_key": key,
                "account_id": account.id if account else None,
                "account_code": account.code if account else None,
                "account_name": account.name if account else None,
                "default_code": DEFAULT_EVENT_CODES.get(key),
                "is_override": key in overrides,
            }
        )
    return out


@transaction.atomic
def update_mappings(items: list[dict]) -> int:
    """
    Upsert {"event_key", "account_id"} pairs for the active chart.

    Items missing either field are skipped. Returns the number written.
    """
    chart = get_active_chart()
    updated = 0

    for item in items:
        event_key = (item.get("event_key") or "").strip().upper()
        account_id = item.get("account_id")
        if not event_key or not account_id:
            continue

        try:
            account = Account.objects.get(pk=account_id, chart=chart)
        except Account.DoesNotExist as exc:
            raise AccountResolutionError(
                f"Account id={account_id} does not exist in the active chart"
            ) from exc

        mapping = AccountingMapping.objects.filter(chart=chart, event_key=event_key).first()
        if mapping is None:
            mapping = AccountingMapping(chart=chart, event_key=event_key)
        mapping.account = account
        mapping.save()
        updated += 1

    logger.info("Updated %s accounting mapping(s) for chart=%s", updated, chart.id)
    return updated
