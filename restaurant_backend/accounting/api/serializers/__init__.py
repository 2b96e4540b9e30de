# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountSerializer, MappingUpdateSerializer
from accounting.api.serializers.close_period import ClosePeriodSerializer, PeriodCloseSerializer
from accounting.api.serializers.expenses import (
    ExpenseApproveSerializer,
    ExpenseCategorySerializer,
    ExpenseRejectSerializer,
    ExpenseSerializer,
    ExpenseSubmitSerializer,
    VendorSerializer,
)
from accounting.api.serializers.journal_entries import (
    JournalEntryCreateSerializer,
    JournalEntrySerializer,
    ManualEntrySerializer,
    ReverseEntrySerializer,
)
from accounting.api.serializers.ledger_entries import LedgerEntrySerializer

__all__ = [
    "AccountSerializer",
    "MappingUpdateSerializer",
    "ClosePeriodSerializer",
    "PeriodCloseSerializer",
    "ExpenseSerializer",
    "ExpenseSubmitSerializer",
    "ExpenseApproveSerializer",
    "ExpenseRejectSerializer",
    "ExpenseCategorySerializer",
    "VendorSerializer",
    "JournalEntrySerializer",
    "JournalEntryCreateSerializer",
    "ManualEntrySerializer",
    "ReverseEntrySerializer",
    "LedgerEntrySerializer",
]
