"""Services for settlement recalculation."""

from settleup.services.balance_service import BalanceService
from settleup.services.debt_matcher import Transfer, match_debts
from settleup.services.expense_hooks import on_expense_changed
from settleup.services.reconciliation_service import ReconciliationPlan, ReconciliationService
from settleup.services.scope_locks import ScopeLocks, scope_locks
from settleup.services.settlement_service import SettlementRecalculationService


def recalc(db, group_id, day):
    """Recalculate pending settlements for (group_id, day). Never raises."""
    return SettlementRecalculationService(db).recalc(group_id, day)


__all__ = [
    "BalanceService",
    "Transfer",
    "match_debts",
    "ReconciliationPlan",
    "ReconciliationService",
    "SettlementRecalculationService",
    "ScopeLocks",
    "scope_locks",
    "on_expense_changed",
    "recalc",
]
