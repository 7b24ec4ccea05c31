"""Hooks for expense create/update/delete to keep the settlement ledger current."""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from settleup.models import Expense
from settleup.services.scope_locks import ScopeLocks, scope_locks
from settleup.services.settlement_service import SettlementRecalculationService, scope_day

logger = logging.getLogger(__name__)


def on_expense_changed(
    db: Session,
    expense: Expense,
    previous_date: Optional[date | datetime] = None,
    locks: ScopeLocks = scope_locks,
) -> List[date]:
    """Recalculate settlements after an expense change has been committed.

    When an update moves the expense to another day, both the old and the
    new day are recalculated. Never raises: an expense that can no longer be
    read (detached, expired or deleted row) is logged and skipped, and
    recalculation failures are handled by the recalculation service.

    Args:
        db: Session the expense change was committed on
        expense: The created, updated or soft-deleted expense
        previous_date: Expense date before the update, if it changed
        locks: Scope lock registry

    Returns:
        Days that were recalculated (empty if the expense could not be read)
    """
    try:
        expense_id = expense.id
        group_id = expense.group_id
        days = {scope_day(expense.expense_date)}
    except SQLAlchemyError:
        logger.exception("Cannot read expense for settlement recalculation, skipping")
        return []

    if previous_date is not None:
        days.add(scope_day(previous_date))

    service = SettlementRecalculationService(db)
    recalculated = sorted(days)
    for day in recalculated:
        with locks.hold(group_id, day):
            service.recalc(group_id, day)

    logger.debug(f"Expense {expense_id} triggered recalculation for {recalculated}")
    return recalculated


__all__ = ["on_expense_changed"]
