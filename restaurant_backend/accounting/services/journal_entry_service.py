# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / LedgerEntry rows
- Enforce debit == credit
- Guarantee atomicity
- Enforce idempotency via reference (prevents double-posting)
- Enforce period locks (no posting into closed periods)
- Reverse an entry (the only way to undo a posting)

Postings are dicts:
    {"account": Account, "debit": "12.50", "credit": 0,
     "branch": Branch | None, "memo": "..."}

ANTI-CIRCULAR-IMPORT RULE:
- period_lock and models of other apps are imported lazily.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from django.apps import apps
from django.db import IntegrityError, transaction

from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    ReversalError,
    UnbalancedEntryError,
)
from accounting.services.money import TWOPLACES, ZERO, as_posted_at, q2

logger = logging.getLogger(__name__)

MIN_LINE_AMOUNT = Decimal("0.01")


def _money(value) -> Decimal:
    try:
        return q2(value)
    except ValueError as exc:
        raise JournalEntryCreationError(str(exc)) from exc


def build_reference(reference_type: str | None, reference_id) -> str | None:
    if not reference_type or reference_id in (None, ""):
        return None

    rt = str(reference_type).strip()
    rid = str(reference_id).strip()
    if not rt or not rid:
        return None

    return f"{rt}:{rid}"


def reposting_reference_id(reference_type: str, reference_id) -> str:
    """
    Reference id for posting a document whose earlier postings were reversed.

    Returns the plain id on first posting (or while the last posting is live,
    so the engine reports the duplicate); otherwise "<id>#<n>".
    """
    candidate = str(reference_id)
    attempt = 1
    while True:
        entry = JournalEntry.objects.filter(reference=build_reference(reference_type, candidate)).first()
        if entry is None or not entry.is_reversed:
            return candidate
        attempt += 1
        candidate = f"{reference_id}#{attempt}"


def _infer_chart(normalized_postings: list[dict]):
    chart_id = normalized_postings[0]["account"].chart_id
    for line in normalized_postings[1:]:
        if line["account"].chart_id != chart_id:
            raise JournalEntryCreationError(
                "All postings must belong to the same chart. Cross-chart journal entries are not allowed."
            )
    return normalized_postings[0]["account"].chart


def _enforce_period_lock(*, chart, posted_at: datetime) -> None:
    from accounting.services.period_lock import PeriodLockedError, assert_period_open

    try:
        assert_period_open(chart=chart, posted_at=posted_at)
    except PeriodLockedError as exc:
        raise JournalEntryCreationError(str(exc)) from exc


def _normalize_postings(postings: list) -> tuple[list[dict], Decimal, Decimal]:
    total_debits = ZERO
    total_credits = ZERO
    normalized: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be an object/dict")

        account = line.get("account")
        if account is None:
            raise JournalEntryCreationError("Posting missing account")

        if not account.is_active:
            raise JournalEntryCreationError(f"Account {account.code} is inactive")

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A posting cannot have both debit and credit")
        if debit == 0 and credit == 0:
            raise JournalEntryCreationError("A posting must have either debit or credit")
        if 0 < debit < MIN_LINE_AMOUNT or 0 < credit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError("Posting amount too small")

        total_debits += debit
        total_credits += credit

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "branch": line.get("branch"),
                "memo": (line.get("memo") or "")[:255],
            }
        )

    return normalized, total_debits.quantize(TWOPLACES), total_credits.quantize(TWOPLACES)


@transaction.atomic
def create_journal_entry(
    *,
    description: str,
    postings: list,
    reference_type: str | None = None,
    reference_id=None,
    posted_at: datetime | None = None,
    branch=None,
    source_type: str = JournalEntry.SourceType.MANUAL,
    user=None,
    reverses: JournalEntry | None = None,
) -> JournalEntry:
    if not postings:
        raise JournalEntryCreationError("Journal entry must contain at least one posting")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    reference = build_reference(reference_type, reference_id)

    normalized, total_debits, total_credits = _normalize_postings(postings)
    if total_debits != total_credits:
        raise UnbalancedEntryError(total_debits, total_credits)

    chart = _infer_chart(normalized)
    posted_at_dt = as_posted_at(posted_at)

    _enforce_period_lock(chart=chart, posted_at=posted_at_dt)

    if reference and JournalEntry.objects.filter(reference=reference).exists():
        raise IdempotencyError(f"Journal entry already exists for reference {reference}")

    try:
        journal_entry = JournalEntry.objects.create(
            description=description,
            reference=reference,
            posted_at=posted_at_dt,
            branch=branch,
            source_type=source_type,
            created_by=user if getattr(user, "is_authenticated", False) else None,
            reverses=reverses,
        )
    except IntegrityError as exc:
        if reference and JournalEntry.objects.filter(reference=reference).exists():
            raise IdempotencyError(
                f"Journal entry already exists for reference {reference}"
            ) from exc
        raise JournalEntryCreationError(f"Failed to create journal entry: {exc}") from exc

    ledger_entries: list[LedgerEntry] = []
    for line in normalized:
        is_debit = line["debit"] > 0
        ledger_entries.append(
            LedgerEntry(
                journal_entry=journal_entry,
                account=line["account"],
                branch=line["branch"] if line["branch"] is not None else branch,
                entry_type=LedgerEntry.DEBIT if is_debit else LedgerEntry.CREDIT,
                amount=line["debit"] if is_debit else line["credit"],
                memo=line["memo"],
            )
        )

    LedgerEntry.objects.bulk_create(ledger_entries)

    logger.info(
        "Posted journal entry id=%s source=%s reference=%s total=%s",
        journal_entry.id,
        source_type,
        reference,
        total_debits,
    )
    return journal_entry


# ------------------------------------------------------------
# REVERSAL
# ------------------------------------------------------------


def _guard_linked_documents(entry: JournalEntry) -> None:
    """Refuse reversals that would leave a linked document inconsistent."""
    if entry.source_type == JournalEntry.SourceType.PERIOD_CLOSE:
        raise ReversalError("Period close entries cannot be reversed")

    PayrollTransaction = apps.get_model("payroll", "PayrollTransaction")
    paid = PayrollTransaction.objects.filter(
        journal_entry=entry,
        status=PayrollTransaction.Status.PAID,
    )
    if paid.exists():
        references = ", ".join(paid.values_list("reference", flat=True))
        raise ReversalError(
            f"Payroll already paid ({references}); reverse the salary payment first"
        )


def _release_linked_documents(entry: JournalEntry) -> None:
    """Put documents that were posted by `entry` back into their pending state."""
    PayrollTransaction = apps.get_model("payroll", "PayrollTransaction")
    released = PayrollTransaction.objects.filter(journal_entry=entry).update(
        gl_status=PayrollTransaction.GLStatus.PENDING,
        journal_entry=None,
    )
    if released:
        logger.info("Reversal of entry id=%s reset %s payroll row(s)", entry.id, released)

    unpaid = PayrollTransaction.objects.filter(payment_journal_entry=entry).update(
        status=PayrollTransaction.Status.APPROVED,
        payment_journal_entry=None,
        paid_at=None,
    )
    if unpaid:
        logger.info("Reversal of entry id=%s reopened %s salary payment(s)", entry.id, unpaid)

    Expense = apps.get_model("accounting", "Expense")
    Expense.objects.filter(journal_entry=entry).update(
        status=Expense.Status.PENDING,
        journal_entry=None,
        reviewed_by=None,
        reviewed_at=None,
    )


@transaction.atomic
def reverse_journal_entry(
    entry: JournalEntry,
    *,
    reason: str = "",
    user=None,
    posted_at: datetime | None = None,
) -> JournalEntry:
    entry = JournalEntry.objects.select_for_update().get(pk=entry.pk)

    if entry.source_type == JournalEntry.SourceType.REVERSAL or entry.reverses_id:
        raise ReversalError("A reversal entry cannot itself be reversed")
    if entry.is_reversed:
        raise ReversalError(f"Journal entry #{entry.id} has already been reversed")
    _guard_linked_documents(entry)

    lines = list(entry.ledger_entries.select_related("account", "branch"))
    if not lines:
        raise ReversalError(f"Journal entry #{entry.id} has no ledger lines")

    postings = [
        {
            "account": line.account,
            "debit": line.amount if line.entry_type == LedgerEntry.CREDIT else 0,
            "credit": line.amount if line.entry_type == LedgerEntry.DEBIT else 0,
            "branch": line.branch,
            "memo": line.memo,
        }
        for line in lines
    ]

    description = f"Reversal of #{entry.id}: {entry.description}"
    if reason:
        description = f"{description} ({reason.strip()})"

    reversal = create_journal_entry(
        description=description,
        postings=postings,
        reference_type="REVERSAL",
        reference_id=entry.id,
        posted_at=posted_at,
        branch=entry.branch,
        source_type=JournalEntry.SourceType.REVERSAL,
        user=user,
        reverses=entry,
    )

    _release_linked_documents(entry)
    return reversal
