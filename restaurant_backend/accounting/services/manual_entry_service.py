# accounting/services/manual_entry_service.py

"""
MANUAL ADJUSTMENTS

One-sided corrections entered by an accountant (opening balances, bank
reconciliations). The offset always lands in Opening Balance Equity so the
ledger stays balanced.
"""

from __future__ import annotations

from datetime import date

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.exceptions import JournalEntryCreationError
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.money import as_posted_at, q2


def post_manual_adjustment(
    *,
    account: Account,
    amount,
    direction: str,
    description: str = "",
    branch=None,
    entry_date: date | None = None,
    user=None,
) -> JournalEntry:
    direction = (direction or "").strip().upper()
    if direction not in (LedgerEntry.DEBIT, LedgerEntry.CREDIT):
        raise JournalEntryCreationError("direction must be DEBIT or CREDIT")

    amount = q2(amount)
    if amount <= 0:
        raise JournalEntryCreationError("Amount must be greater than zero")

    offset = resolve_account(keys.OPENING_BALANCE_EQUITY, chart=account.chart)
    if offset.id == account.id:
        raise JournalEntryCreationError("Cannot adjust the offset account against itself")

    target_side, offset_side = ("debit", "credit") if direction == LedgerEntry.DEBIT else ("credit", "debit")

    return create_journal_entry(
        description=(description or "").strip() or "Manual Adjustment",
        postings=[
            {"account": account, target_side: amount},
            {"account": offset, offset_side: amount},
        ],
        posted_at=as_posted_at(entry_date) if entry_date else None,
        branch=branch,
        source_type=JournalEntry.SourceType.ADJUSTMENT,
        user=user,
    )
