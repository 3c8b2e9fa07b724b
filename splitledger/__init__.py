"""
Shared Expense Ledger & Settlement Engine

This module provides:
- Split calculation (equal and custom) with exact-sum validation
- Net balances from a balance snapshot plus the session payment log
- Deterministic settlement plans (who pays whom)
- An audit trail of expenses and logged payments
"""

from .models import (
    SplitMode,
    Participant,
    Expense,
    ExpenseSplit,
    Payment,
    BalanceSnapshot,
    NetBalance,
    Settlement,
    AuditProjection,
)
from .errors import LedgerError, ValidationError, DataError, PartialPersistenceError
from .splits import compute_splits
from .balances import aggregate_balances
from .planner import plan_settlements
from .audit import project_audit, format_audit_timestamp
from .payments import PaymentLog, build_payment
from .service import TrackerService

__all__ = [
    "SplitMode",
    "Participant",
    "Expense",
    "ExpenseSplit",
    "Payment",
    "BalanceSnapshot",
    "NetBalance",
    "Settlement",
    "AuditProjection",
    "LedgerError",
    "ValidationError",
    "DataError",
    "PartialPersistenceError",
    "compute_splits",
    "aggregate_balances",
    "plan_settlements",
    "project_audit",
    "format_audit_timestamp",
    "PaymentLog",
    "build_payment",
    "TrackerService",
]
