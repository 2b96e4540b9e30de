# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTERS

Map operational events (inventory, payroll) to ledger postings and call
create_journal_entry (the engine).

This module stays a thin adapter:
- It DOES NOT run workflows (inventory/payroll services do).
- It DOES decide which accounts an event hits.
- It ALWAYS goes through the engine for immutability + idempotency.

Inventory side-effect postings honour ACCOUNTING_POSTING_ENABLED; when the
flag is off they log and return None. Payroll postings are explicit
accounting actions and always post.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings

from accounting.models.journal import JournalEntry
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.journal_entry_service import create_journal_entry, reposting_reference_id
from accounting.services.money import ZERO, as_posted_at, q2

logger = logging.getLogger(__name__)

STAFF_MEAL_REASON = "STAFF_MEAL"


def posting_enabled() -> bool:
    return bool(getattr(settings, "ACCOUNTING_POSTING_ENABLED", True))


def _skip(event: str, ref) -> None:
    logger.info("Ledger posting disabled; skipped %s %s", event, ref)


# ------------------------------------------------------------
# INVENTORY
# ------------------------------------------------------------


def post_purchase_receipt(invoice, *, amount: Decimal, user=None) -> JournalEntry | None:
    """Dr Inventory / Cr Accounts Payable for a received supplier invoice."""
    amount = q2(amount)
    if amount <= ZERO:
        return None
    if not posting_enabled():
        _skip("purchase", invoice.id)
        return None

    return create_journal_entry(
        description=f"Purchase invoice {invoice.invoice_number} from {invoice.vendor}",
        postings=[
            {"account": resolve_account(keys.INVENTORY), "debit": amount},
            {"account": resolve_account(keys.ACCOUNTS_PAYABLE), "credit": amount},
        ],
        reference_type="PURCHASE",
        reference_id=invoice.id,
        posted_at=as_posted_at(invoice.invoice_date),
        branch=invoice.branch,
        source_type=JournalEntry.SourceType.PURCHASE,
        user=user,
    )


def post_waste(waste_log, *, user=None) -> JournalEntry | None:
    """Dr Waste (or Staff Meal) expense / Cr Inventory at cost."""
    amount = q2(waste_log.cost_impact)
    if amount <= ZERO:
        return None
    if not posting_enabled():
        _skip("waste", waste_log.id)
        return None

    expense_key = keys.STAFF_MEAL_EXPENSE if waste_log.reason == STAFF_MEAL_REASON else keys.WASTE_EXPENSE

    return create_journal_entry(
        description=f"Waste: {waste_log.quantity} x {waste_log.product.name} ({waste_log.reason})",
        postings=[
            {"account": resolve_account(expense_key), "debit": amount},
            {"account": resolve_account(keys.INVENTORY), "credit": amount},
        ],
        reference_type="WASTE",
        reference_id=waste_log.id,
        posted_at=waste_log.occurred_at,
        branch=waste_log.branch,
        source_type=JournalEntry.SourceType.WASTE,
        user=user,
    )


def post_stock_transfer(transfer, *, amount: Decimal, user=None) -> JournalEntry | None:
    """
    Dr Inventory (destination branch) / Cr Inventory (source branch).

    Net zero for the business; it moves inventory value between branch slices.
    """
    amount = q2(amount)
    if amount <= ZERO:
        return None
    if not posting_enabled():
        _skip("transfer", transfer.id)
        return None

    inventory = resolve_account(keys.INVENTORY)
    return create_journal_entry(
        description=f"Stock transfer #{transfer.id}: {transfer.from_branch} to {transfer.to_branch}",
        postings=[
            {"account": inventory, "debit": amount, "branch": transfer.to_branch, "memo": "Transfer in"},
            {"account": inventory, "credit": amount, "branch": transfer.from_branch, "memo": "Transfer out"},
        ],
        reference_type="TRANSFER",
        reference_id=transfer.id,
        posted_at=transfer.received_at,
        branch=transfer.to_branch,
        source_type=JournalEntry.SourceType.TRANSFER,
        user=user,
    )


def post_stock_count(stock_count, *, net_value: Decimal, user=None) -> JournalEntry | None:
    """
    Book count differences at cost.

    net_value > 0 is shrinkage (Dr Shrinkage / Cr Inventory);
    net_value < 0 is an overage (Dr Inventory / Cr Shrinkage).
    """
    net_value = q2(net_value)
    if net_value == ZERO:
        return None
    if not posting_enabled():
        _skip("stock count", stock_count.id)
        return None

    shrinkage = resolve_account(keys.INVENTORY_SHRINKAGE)
    inventory = resolve_account(keys.INVENTORY)
    amount = abs(net_value)

    if net_value > ZERO:
        postings = [
            {"account": shrinkage, "debit": amount},
            {"account": inventory, "credit": amount},
        ]
    else:
        postings = [
            {"account": inventory, "debit": amount},
            {"account": shrinkage, "credit": amount},
        ]

    return create_journal_entry(
        description=f"Stock count #{stock_count.id} at {stock_count.branch}",
        postings=postings,
        reference_type="STOCK_COUNT",
        reference_id=stock_count.id,
        posted_at=stock_count.counted_at,
        branch=stock_count.branch,
        source_type=JournalEntry.SourceType.STOCK_COUNT,
        user=user,
    )


# ------------------------------------------------------------
# PAYROLL
# ------------------------------------------------------------


def post_payroll_accrual(*, batch_key: str, amount: Decimal, description: str, posted_at=None, user=None) -> JournalEntry:
    """Dr Salaries Expense / Cr Salaries Payable for a batch of approved payroll rows."""
    amount = q2(amount)
    return create_journal_entry(
        description=description,
        postings=[
            {"account": resolve_account(keys.SALARIES_EXPENSE), "debit": amount},
            {"account": resolve_account(keys.SALARIES_PAYABLE), "credit": amount},
        ],
        reference_type="PAYROLL",
        reference_id=reposting_reference_id("PAYROLL", batch_key),
        posted_at=posted_at,
        source_type=JournalEntry.SourceType.PAYROLL,
        user=user,
    )


def post_payroll_payment(payroll_transaction, *, user=None) -> JournalEntry:
    """Dr Salaries Payable / Cr Bank when a salary is paid out."""
    amount = q2(payroll_transaction.final_amount)
    return create_journal_entry(
        description=f"Salary payment {payroll_transaction.reference}",
        postings=[
            {"account": resolve_account(keys.SALARIES_PAYABLE), "debit": amount},
            {"account": resolve_account(keys.BANK), "credit": amount},
        ],
        reference_type="PAYROLL_PAYMENT",
        reference_id=reposting_reference_id("PAYROLL_PAYMENT", payroll_transaction.reference),
        source_type=JournalEntry.SourceType.PAYROLL,
        user=user,
    )
