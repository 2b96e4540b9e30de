# accounting/services/balance_service.py

"""
BALANCE & AGGREGATION SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers shared by every report.

RULES:
- READ-ONLY: no writes, ever
- LedgerEntry is the single source of truth
- Accounting timeline is JournalEntry.posted_at
- Date bounds are inclusive whole local days; datetimes are used as given
- Branch slicing filters on LedgerEntry.branch
- Chart-aware: never mix charts
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import ZERO, as_aware, end_of_day_exclusive, q2, start_of_day


class BalanceServiceError(AccountingServiceError):
    """Base error for balance and reporting services."""


@dataclass(frozen=True)
class AccountTotals:
    account: Account
    debit: Decimal
    credit: Decimal

    @property
    def balance(self) -> Decimal:
        return signed_balance(self.account.account_type, self.debit, self.credit)


def signed_balance(account_type: str, debit: Decimal, credit: Decimal) -> Decimal:
    """
    - Assets & Expenses -> debit balance (debits - credits)
    - Liabilities, Equity & Revenue -> credit balance (credits - debits)
    """
    if account_type in Account.DEBIT_NORMAL_TYPES:
        return q2(debit - credit)
    return q2(credit - debit)


def ledger_queryset(
    *,
    chart=None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    branch_ids: Iterable[int] | None = None,
):
    qs = LedgerEntry.objects.all()

    if chart is not None:
        qs = qs.filter(account__chart=chart)

    if start is not None:
        if isinstance(start, datetime):
            qs = qs.filter(journal_entry__posted_at__gte=as_aware(start))
        else:
            qs = qs.filter(journal_entry__posted_at__gte=start_of_day(start))

    if end is not None:
        if isinstance(end, datetime):
            qs = qs.filter(journal_entry__posted_at__lte=as_aware(end))
        else:
            qs = qs.filter(journal_entry__posted_at__lt=end_of_day_exclusive(end))

    if branch_ids is not None:
        qs = qs.filter(branch_id__in=list(branch_ids))

    return qs


def _debit_credit_by_account(qs) -> dict[int, tuple[Decimal, Decimal]]:
    rows = qs.values("account_id", "entry_type").annotate(
        total=Coalesce(Sum("amount"), Decimal("0.00"))
    )

    out: dict[int, list[Decimal]] = {}
    for r in rows:
        slot = out.setdefault(r["account_id"], [ZERO, ZERO])
        if r["entry_type"] == LedgerEntry.DEBIT:
            slot[0] = q2(r["total"])
        else:
            slot[1] = q2(r["total"])
    return {k: (v[0], v[1]) for k, v in out.items()}


def account_totals(
    chart,
    *,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    branch_ids: Iterable[int] | None = None,
    account_types: Iterable[str] | None = None,
) -> list[AccountTotals]:
    """
    Bulk per-account debit/credit totals (no N+1), ordered by account code.

    Inactive accounts are included: deactivation hides an account from new
    postings, not from history.
    """
    if chart is None:
        raise BalanceServiceError("Chart of Accounts is required")

    accounts_qs = Account.objects.filter(chart=chart).order_by("code")
    if account_types is not None:
        accounts_qs = accounts_qs.filter(account_type__in=list(account_types))
    accounts = list(accounts_qs)
    if not accounts:
        return []

    qs = ledger_queryset(chart=chart, start=start, end=end, branch_ids=branch_ids).filter(
        account_id__in=[a.id for a in accounts]
    )
    totals = _debit_credit_by_account(qs)

    return [
        AccountTotals(account=acc, debit=totals.get(acc.id, (ZERO, ZERO))[0], credit=totals.get(acc.id, (ZERO, ZERO))[1])
        for acc in accounts
    ]


def get_account_balance(
    account: Account,
    *,
    as_of: date | datetime | None = None,
    branch_ids: Iterable[int] | None = None,
) -> Decimal:
    if account is None:
        raise BalanceServiceError("Account is required")

    qs = ledger_queryset(end=as_of, branch_ids=branch_ids).filter(account=account)
    debit, credit = _debit_credit_by_account(qs).get(account.id, (ZERO, ZERO))
    return signed_balance(account.account_type, debit, credit)


def get_totals_by_account_type(
    chart,
    *,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    branch_ids: Iterable[int] | None = None,
) -> dict[str, Decimal]:
    totals = {code: ZERO for code, _ in Account.ACCOUNT_TYPES}
    for row in account_totals(chart, start=start, end=end, branch_ids=branch_ids):
        totals[row.account.account_type] = q2(totals[row.account.account_type] + row.balance)
    return totals
