# accounting/services/trial_balance_service.py

from __future__ import annotations

from datetime import date

from django.utils import timezone

from accounting.services.account_resolver import get_active_chart
from accounting.services.balance_service import account_totals
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int


class TrialBalanceService:
    """
    Trial balance as of a date (inclusive).

    - Scopes to the provided chart or the active chart
    - Omits accounts with no activity
    - Returns JSON-safe numbers (float major units + int minor units)
    """

    def generate(self, *, chart=None, as_of: date | None = None, branch_ids=None) -> dict:
        as_of = as_of or timezone.localdate()
        active_chart = chart or get_active_chart()

        accounts_output = []
        total_debit = ZERO
        total_credit = ZERO

        for row in account_totals(active_chart, end=as_of, branch_ids=branch_ids):
            if row.debit == ZERO and row.credit == ZERO:
                continue

            accounts_output.append(
                {
                    "account_id": row.account.id,
                    "account_code": row.account.code,
                    "account_name": row.account.name,
                    "account_type": row.account.account_type,
                    "debit": to_major_number(row.debit),
                    "credit": to_major_number(row.credit),
                    "debit_minor": to_minor_int(row.debit),
                    "credit_minor": to_minor_int(row.credit),
                }
            )
            total_debit += row.debit
            total_credit += row.credit

        total_debit = q2(total_debit)
        total_credit = q2(total_credit)

        return {
            "as_of": as_of.isoformat(),
            "accounts": accounts_output,
            "totals": {
                "debit": to_major_number(total_debit),
                "credit": to_major_number(total_credit),
                "debit_minor": to_minor_int(total_debit),
                "credit_minor": to_minor_int(total_credit),
                "balanced": total_debit == total_credit,
            },
        }
