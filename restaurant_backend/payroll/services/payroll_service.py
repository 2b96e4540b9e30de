# payroll/services/payroll_service.py

"""
======================================================
PATH: payroll/services/payroll_service.py
======================================================
PAYROLL SERVICE

initiate_payroll()   PENDING row: final_amount = hours x rate, reference
                     PAY_<yyyymmdd>_<first 8 of employee id>
                     hours default to clocked time entries for the period,
                     falling back to COMPLETED shifts when none were clocked
approve_payroll()    PENDING -> APPROVED
reject_payroll()     PENDING/APPROVED -> REJECTED (never once posted)
post_payroll_to_gl() one accrual entry for every APPROVED + unposted row
                     selected; rows are linked and marked POSTED together
mark_paid()          APPROVED + POSTED -> PAID; Dr Salaries Payable / Cr Bank
mark_failed()        APPROVED -> FAILED with the payout error

No bank API is called here; payout happens outside the system and is
recorded with mark_paid / mark_failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.apps import apps
from django.db import transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.money import q2
from accounting.services.posting import post_payroll_accrual, post_payroll_payment
from payroll.models import PayrollTransaction
from scheduling.services.attendance_service import hours_from_time_entries

logger = logging.getLogger(__name__)


class PayrollError(ValueError):
    """Domain error for payroll workflows."""


@dataclass(frozen=True)
class PayrollPostResult:
    journal_entry: JournalEntry
    posted_count: int
    total_amount: Decimal


def _non_negative(value, field: str) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise PayrollError(f"{field} is required")
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise PayrollError(f"{field} must be a number")
    if not d.is_finite() or d < 0:
        raise PayrollError(f"{field} cannot be negative")
    return d


def build_payment_reference(employee, on: date | None = None) -> str:
    on = on or timezone.localdate()
    base = f"PAY_{on:%Y%m%d}_{str(employee.pk).replace('-', '')[:8]}"
    reference = base
    n = 1
    while PayrollTransaction.objects.filter(reference=reference).exists():
        n += 1
        reference = f"{base}_{n}"
    return reference


def hours_from_shifts(employee, period_start: date, period_end: date) -> Decimal:
    """Sum of COMPLETED shift durations for the period, in hours."""
    Shift = apps.get_model("scheduling", "Shift")
    total_seconds = 0
    shifts = Shift.objects.filter(
        user=employee,
        date__gte=period_start,
        date__lte=period_end,
        status=Shift.Status.COMPLETED,
    )
    for shift in shifts:
        start = datetime.combine(shift.date, shift.start_time)
        end = datetime.combine(shift.date, shift.end_time)
        total_seconds += (end - start).total_seconds()
    return q2(Decimal(total_seconds) / Decimal(3600))


def worked_hours(employee, period_start: date, period_end: date) -> Decimal:
    clocked = hours_from_time_entries(employee, period_start, period_end)
    if clocked is not None:
        return clocked
    return hours_from_shifts(employee, period_start, period_end)


@transaction.atomic
def initiate_payroll(
    *,
    employee,
    period_start: date | None = None,
    period_end: date | None = None,
    total_hours=None,
    hourly_rate=None,
    branch=None,
    notes: str = "",
    user=None,
) -> PayrollTransaction:
    if employee is None or not employee.is_active:
        raise PayrollError("Employee not found or inactive")

    today = timezone.localdate()
    period_start = period_start or today
    period_end = period_end or period_start
    if period_end < period_start:
        raise PayrollError("period_end must be on or after period_start")

    if total_hours is None:
        hours = worked_hours(employee, period_start, period_end)
    else:
        hours = _non_negative(total_hours, "total_hours")

    rate = _non_negative(employee.hourly_rate if hourly_rate is None else hourly_rate, "hourly_rate")

    row = PayrollTransaction.objects.create(
        employee=employee,
        branch=branch or getattr(employee, "default_branch", None),
        total_hours=q2(hours),
        hourly_rate=q2(rate),
        final_amount=q2(hours * rate),
        period_start=period_start,
        period_end=period_end,
        reference=build_payment_reference(employee, today),
        notes=notes or "",
        created_by=user,
    )
    logger.info("Payroll initiated %s for %s: %s", row.reference, employee.pk, row.final_amount)
    return row


def _lock(row: PayrollTransaction) -> PayrollTransaction:
    return PayrollTransaction.objects.select_for_update().get(pk=row.pk)


@transaction.atomic
def approve_payroll(row: PayrollTransaction, *, user=None) -> PayrollTransaction:
    locked = _lock(row)
    if locked.status != PayrollTransaction.Status.PENDING:
        raise PayrollError(f"Only PENDING payroll can be approved (current: {locked.status})")

    locked.status = PayrollTransaction.Status.APPROVED
    locked.approved_by = user
    locked.approved_at = timezone.now()
    locked.save()
    return locked


@transaction.atomic
def reject_payroll(row: PayrollTransaction, *, user=None, reason: str = "") -> PayrollTransaction:
    locked = _lock(row)
    if locked.status not in (PayrollTransaction.Status.PENDING, PayrollTransaction.Status.APPROVED):
        raise PayrollError(f"Payroll in status {locked.status} cannot be rejected")
    if locked.gl_status == PayrollTransaction.GLStatus.POSTED:
        raise PayrollError("Payroll already posted to the ledger; reverse the journal entry first")

    locked.status = PayrollTransaction.Status.REJECTED
    if reason:
        locked.notes = f"{locked.notes}\nRejected: {reason}".strip()
    locked.save()
    logger.info("Payroll %s rejected by %s", locked.reference, getattr(user, "pk", None))
    return locked


@transaction.atomic
def post_payroll_to_gl(payroll_ids, *, user=None, posted_at=None) -> PayrollPostResult:
    ids = list(payroll_ids or [])
    if not ids:
        raise PayrollError("No payroll transactions selected")

    rows = list(
        PayrollTransaction.objects.select_for_update()
        .filter(
            id__in=ids,
            status=PayrollTransaction.Status.APPROVED,
            gl_status=PayrollTransaction.GLStatus.PENDING,
        )
        .order_by("id")
    )
    if not rows:
        raise PayrollError("No approved, pending transactions found")

    total = q2(sum((r.final_amount for r in rows), Decimal("0")))
    posted_on = timezone.localdate()
    description = f"Payroll run {posted_on:%B %Y} - {len(rows)} employee(s)"

    entry = post_payroll_accrual(
        batch_key=f"{posted_on.isoformat()}:{rows[0].id}",
        amount=total,
        description=description,
        posted_at=posted_at,
        user=user,
    )

    PayrollTransaction.objects.filter(id__in=[r.id for r in rows]).update(
        gl_status=PayrollTransaction.GLStatus.POSTED,
        journal_entry=entry,
        updated_at=timezone.now(),
    )

    logger.info("Payroll posted to GL: entry id=%s rows=%s total=%s", entry.id, len(rows), total)
    return PayrollPostResult(journal_entry=entry, posted_count=len(rows), total_amount=total)


@transaction.atomic
def mark_paid(row: PayrollTransaction, *, user=None) -> PayrollTransaction:
    locked = _lock(row)
    if locked.status != PayrollTransaction.Status.APPROVED:
        raise PayrollError(f"Only APPROVED payroll can be paid (current: {locked.status})")
    if locked.gl_status != PayrollTransaction.GLStatus.POSTED:
        raise PayrollError("Post the payroll accrual to the ledger before paying")

    locked.payment_journal_entry = post_payroll_payment(locked, user=user)
    locked.status = PayrollTransaction.Status.PAID
    locked.paid_at = timezone.now()
    locked.save()
    return locked


@transaction.atomic
def mark_failed(row: PayrollTransaction, *, error: str, user=None) -> PayrollTransaction:
    locked = _lock(row)
    if locked.status != PayrollTransaction.Status.APPROVED:
        raise PayrollError(f"Only APPROVED payroll can fail payout (current: {locked.status})")

    locked.status = PayrollTransaction.Status.FAILED
    locked.error_message = (error or "Payout failed")[:255]
    locked.save()
    logger.warning("Payroll payout failed for %s: %s", locked.reference, locked.error_message)
    return locked
