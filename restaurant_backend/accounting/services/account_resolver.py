# accounting/services/account_resolver.py

"""
======================================================
PATH: accounting/services/account_resolver.py
======================================================
ACCOUNT RESOLVER (AUTHORITATIVE)

Answers one question: "Which account does this business event post to?"

Resolution order for an event key (e.g. WASTE_EXPENSE):
1. An AccountingMapping row for the active chart
2. DEFAULT_EVENT_CODES -> account code in the active chart
3. AccountResolutionError (never guess; posting to the wrong account is worse
   than failing)

Active chart:
- exactly one active -> it
- none active -> activate the oldest chart, or create the standard chart
- several active -> hard-fail
"""

from __future__ import annotations

import logging
from functools import lru_cache

from django.core.exceptions import MultipleObjectsReturned, ObjectDoesNotExist
from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.models.mapping import AccountingMapping
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# EVENT KEYS
# ------------------------------------------------------------

CASH = "CASH"
BANK = "BANK"
INVENTORY = "INVENTORY"
ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
VAT_PAYABLE = "VAT_PAYABLE"
SALARIES_PAYABLE = "SALARIES_PAYABLE"
RETAINED_EARNINGS = "RETAINED_EARNINGS"
OPENING_BALANCE_EQUITY = "OPENING_BALANCE_EQUITY"
SALES_REVENUE = "SALES_REVENUE"
COGS = "COGS"
WASTE_EXPENSE = "WASTE_EXPENSE"
STAFF_MEAL_EXPENSE = "STAFF_MEAL_EXPENSE"
INVENTORY_SHRINKAGE = "INVENTORY_SHRINKAGE"
SALARIES_EXPENSE = "SALARIES_EXPENSE"
MERCHANT_FEES = "MERCHANT_FEES"

DEFAULT_EVENT_CODES = {
    CASH: "1010",
    BANK: "1020",
    INVENTORY: "1100",
    ACCOUNTS_PAYABLE: "2010",
    VAT_PAYABLE: "2020",
    SALARIES_PAYABLE: "2200",
    RETAINED_EARNINGS: "3010",
    OPENING_BALANCE_EQUITY: "3020",
    SALES_REVENUE: "4001",
    COGS: "5001",
    WASTE_EXPENSE: "5010",
    INVENTORY_SHRINKAGE: "5020",
    STAFF_MEAL_EXPENSE: "5040",
    SALARIES_EXPENSE: "6020",
    MERCHANT_FEES: "6100",
}

EVENT_KEYS = tuple(DEFAULT_EVENT_CODES.keys())

DEFAULT_CHART_NAME = "Restaurant Standard Chart"
DEFAULT_CHART_CODE = "restaurant-standard"


# ------------------------------------------------------------
# ACTIVE CHART
# ------------------------------------------------------------


def _bootstrap_active_chart() -> ChartOfAccounts:
    with transaction.atomic():
        active_qs = ChartOfAccounts.objects.select_for_update().filter(is_active=True)
        active_count = active_qs.count()

        if active_count == 1:
            return active_qs.first()
        if active_count > 1:
            raise AccountResolutionError(
                "Multiple active Charts of Accounts found. Only one active chart is allowed."
            )

        existing = ChartOfAccounts.objects.select_for_update().order_by("id").first()
        if existing:
            existing.is_active = True
            existing.save()
            logger.warning("Activated existing chart id=%s name=%s", existing.id, existing.name)
            return existing

        chart = ChartOfAccounts.objects.create(
            name=DEFAULT_CHART_NAME,
            code=DEFAULT_CHART_CODE,
            industry="Restaurant",
            is_active=True,
        )
        logger.warning("Created default chart id=%s name=%s", chart.id, chart.name)
        return chart


@lru_cache(maxsize=1)
def get_active_chart() -> ChartOfAccounts:
    """
    Cached resolver for the single active chart.

    Call clear_active_chart_cache() after toggling charts (the model's save
    does this for you).
    """
    try:
        return ChartOfAccounts.objects.get(is_active=True)
    except ObjectDoesNotExist:
        chart = _bootstrap_active_chart()
        clear_active_chart_cache()
        return chart
    except MultipleObjectsReturned as exc:
        raise AccountResolutionError(
            "Multiple active Charts of Accounts found. Only one active chart is allowed."
        ) from exc


def clear_active_chart_cache() -> None:
    get_active_chart.cache_clear()


# ------------------------------------------------------------
# RESOLUTION
# ------------------------------------------------------------


def _normalize_key(event_key: str) -> str:
    key = (event_key or "").strip().upper()
    if not key:
        raise AccountResolutionError("event_key is required")
    return key


def get_account_by_code(code: str, *, chart: ChartOfAccounts | None = None) -> Account:
    chart = chart or get_active_chart()
    code = (code or "").strip()
    try:
        return Account.objects.get(chart=chart, code=code, is_active=True)
    except ObjectDoesNotExist as exc:
        raise AccountResolutionError(
            f"Account with code={code} not found (or inactive) in chart '{chart.name}'. "
            "Run seed_restaurant_chart or create the account."
        ) from exc


def resolve_account(event_key: str, *, chart: ChartOfAccounts | None = None) -> Account:
    key = _normalize_key(event_key)
    chart = chart or get_active_chart()

    mapping = (
        AccountingMapping.objects.select_related("account")
        .filter(chart=chart, event_key=key)
        .first()
    )
    if mapping is not None:
        if not mapping.account.is_active:
            raise AccountResolutionError(
                f"Account {mapping.account.code} mapped to {key} is inactive"
            )
        return mapping.account

    code = DEFAULT_EVENT_CODES.get(key)
    if not code:
        raise AccountResolutionError(
            f"No mapping for event key '{key}' in chart '{chart.name}' and no default code."
        )
    return get_account_by_code(code, chart=chart)


def try_resolve_account(event_key: str, *, chart: ChartOfAccounts | None = None) -> Account | None:
    try:
        return resolve_account(event_key, chart=chart)
    except AccountResolutionError:
        return None


def get_inventory_account() -> Account:
    return resolve_account(INVENTORY)


def get_cogs_account() -> Account:
    return resolve_account(COGS)


def get_accounts_payable_account() -> Account:
    return resolve_account(ACCOUNTS_PAYABLE)


def get_bank_account() -> Account:
    return resolve_account(BANK)


def get_retained_earnings_account() -> Account:
    return resolve_account(RETAINED_EARNINGS)
