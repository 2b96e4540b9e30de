# accounting/services/expense_service.py

"""
EXPENSE CLAIM SERVICE

Responsibilities:
- Submit a claim (defaults accounts from its category)
- Approve: post Dr debit_account / Cr credit_account dated expense_date,
  reference "EXPENSE:<id>", then mark APPROVED
- Reject: record reason, no ledger impact

Only PENDING claims can be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.expense import Expense, ExpenseCategory
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import ExpenseWorkflowError
from accounting.services.journal_entry_service import create_journal_entry, reposting_reference_id
from accounting.services.money import as_posted_at, q2


@dataclass(frozen=True)
class ExpenseApprovalResult:
    expense: Expense
    journal_entry: JournalEntry


def submit_expense(
    *,
    submitted_by,
    amount,
    expense_date=None,
    description: str = "",
    notes: str = "",
    category: ExpenseCategory | None = None,
    custom_category: str = "",
    branch=None,
) -> Expense:
    amount = q2(amount)
    if amount <= 0:
        raise ExpenseWorkflowError("Amount must be greater than zero")

    expense = Expense(
        submitted_by=submitted_by,
        amount=amount,
        description=(description or "").strip(),
        notes=notes or "",
        category=category,
        custom_category=(custom_category or "").strip(),
        branch=branch,
    )
    if expense_date is not None:
        expense.expense_date = expense_date
    if category is not None:
        expense.debit_account = category.debit_account
        expense.credit_account = category.credit_account

    expense.save()
    return expense


def _lock_pending(expense: Expense) -> Expense:
    expense = Expense.objects.select_for_update().get(pk=expense.pk)
    if expense.status != Expense.Status.PENDING:
        raise ExpenseWorkflowError("Expense has already been reviewed")
    return expense


@transaction.atomic
def approve_expense(
    expense: Expense,
    *,
    reviewer,
    debit_account: Account | None = None,
    credit_account: Account | None = None,
) -> ExpenseApprovalResult:
    expense = _lock_pending(expense)

    debit_account = debit_account or expense.debit_account
    credit_account = credit_account or expense.credit_account
    if debit_account is None or credit_account is None:
        raise ExpenseWorkflowError("debit_account and credit_account are required to approve")
    if debit_account.id == credit_account.id:
        raise ExpenseWorkflowError("debit_account and credit_account must differ")

    journal_entry = create_journal_entry(
        description=f"Expense: {expense.label}",
        postings=[
            {"account": debit_account, "debit": expense.amount},
            {"account": credit_account, "credit": expense.amount},
        ],
        reference_type="EXPENSE",
        reference_id=reposting_reference_id("EXPENSE", expense.id),
        posted_at=as_posted_at(expense.expense_date),
        branch=expense.branch,
        source_type=JournalEntry.SourceType.EXPENSE,
        user=reviewer,
    )

    expense.debit_account = debit_account
    expense.credit_account = credit_account
    expense.status = Expense.Status.APPROVED
    expense.reviewed_by = reviewer
    expense.reviewed_at = timezone.now()
    expense.rejection_reason = ""
    expense.journal_entry = journal_entry
    expense.save()

    return ExpenseApprovalResult(expense=expense, journal_entry=journal_entry)


@transaction.atomic
def reject_expense(expense: Expense, *, reviewer, reason: str = "") -> Expense:
    expense = _lock_pending(expense)

    expense.status = Expense.Status.REJECTED
    expense.reviewed_by = reviewer
    expense.reviewed_at = timezone.now()
    expense.rejection_reason = (reason or "").strip()[:255]
    expense.save()
    return expense
