"""Daily settlement recalculation for a group.

Pipeline for one (group, day) scope:
1. Load active expenses and all settlements of the day
2. Aggregate balances (executed settlements included, pending ones not)
3. Match debtors to creditors
4. Reconcile the transfers with the pending ledger and commit once

Runs are stateless: every call recomputes the scope from scratch, so a failed
run is repaired by the next one. Callers must serialize runs per scope
(see ScopeLocks).
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from settleup.models import Expense, Settlement
from settleup.services.audit_service import SCOPE_ENTITY, AuditService
from settleup.services.balance_service import BalanceService
from settleup.services.debt_matcher import match_debts
from settleup.services.errors import LedgerReadError
from settleup.services.reconciliation_service import ReconciliationPlan, ReconciliationService

logger = logging.getLogger(__name__)


def scope_day(value: date | datetime) -> date:
    """Normalize a date or datetime to the scope day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open [start, end) datetime window of a day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class SettlementRecalculationService:
    """Recompute pending settlements for a (group, day) scope."""

    def __init__(self, db: Session):
        """Initialize with database session.

        Args:
            db: Session used for reads, ledger writes and audit entries
        """
        self.db = db
        self.balances = BalanceService()
        self.reconciliation = ReconciliationService(db)

    def load_expenses(self, group_id: int, day: date) -> List[Expense]:
        """Active expenses of the group on the given day.

        Raises:
            LedgerReadError: On database errors
        """
        start, end = day_bounds(day)
        try:
            return list(
                self.db.execute(
                    select(Expense)
                    .options(selectinload(Expense.participants))
                    .where(
                        Expense.group_id == group_id,
                        Expense.is_active.is_(True),
                        Expense.expense_date >= start,
                        Expense.expense_date < end,
                    )
                    .order_by(Expense.id)
                ).scalars()
            )
        except SQLAlchemyError as e:
            raise LedgerReadError(f"Failed to load expenses for group {group_id} on {day}") from e

    def load_settlements(self, group_id: int, day: date) -> List[Settlement]:
        """All settlements of the group on the given day, any status.

        Raises:
            LedgerReadError: On database errors
        """
        try:
            return list(
                self.db.execute(
                    select(Settlement)
                    .where(
                        Settlement.group_id == group_id,
                        Settlement.settlement_date == day,
                    )
                    .order_by(Settlement.id)
                ).scalars()
            )
        except SQLAlchemyError as e:
            raise LedgerReadError(
                f"Failed to load settlements for group {group_id} on {day}"
            ) from e

    def compute_plan(self, group_id: int, day: date | datetime) -> ReconciliationPlan:
        """Run aggregation, matching and diffing without writing anything.

        Raises:
            LedgerReadError: If the scope cannot be loaded
        """
        day = scope_day(day)
        expenses = self.load_expenses(group_id, day)
        settlements = self.load_settlements(group_id, day)

        balances = self.balances.net_balances(expenses, settlements)
        transfers = match_debts(balances)
        return self.reconciliation.plan(transfers, settlements)

    def recalc(self, group_id: int, day: date | datetime) -> Optional[ReconciliationPlan]:
        """Recalculate and persist pending settlements for one scope.

        Never raises: failures are rolled back, logged and written to the
        audit log as "recalc_failed" so the scope can be found and retried.

        Args:
            group_id: Group whose ledger is recalculated
            day: Scope day (datetime values are truncated to their date)

        Returns:
            The applied plan, or None if the run failed
        """
        day = scope_day(day)
        try:
            plan = self.compute_plan(group_id, day)
            self.reconciliation.apply(plan, group_id, day)

            previous = AuditService.last_scope_entry(self.db, group_id, day)
            recovering = previous is not None and previous.action == "recalc_failed"
            if not plan.is_empty or recovering:
                AuditService.log(
                    self.db,
                    entity_type=SCOPE_ENTITY,
                    entity_id=group_id,
                    action="recalc_recovered" if recovering else "recalc",
                    changes={"date": day.isoformat(), **plan.summary()},
                    scope_date=day,
                )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Error calculating daily settlements for group {group_id} on {day}")
            self._record_failure(group_id, day, e)
            return None

        if plan.is_empty:
            logger.debug(f"Settlements for group {group_id} on {day} already up to date")
        else:
            logger.info(f"Recalculated settlements for group {group_id} on {day}: {plan.summary()}")
        return plan

    def _record_failure(self, group_id: int, day: date, error: Exception) -> None:
        try:
            AuditService.log(
                self.db,
                entity_type=SCOPE_ENTITY,
                entity_id=group_id,
                action="recalc_failed",
                changes={
                    "date": day.isoformat(),
                    "error": f"{type(error).__name__}: {error}",
                },
                scope_date=day,
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Could not record recalculation failure for group {group_id} on {day}")

    def find_stale_scopes(self) -> List[Tuple[int, date]]:
        """Scopes whose most recent recalculation failed.

        Returns:
            (group_id, day) pairs, ordered by group then day
        """
        return AuditService.failed_scopes(self.db)


__all__ = ["SettlementRecalculationService", "scope_day", "day_bounds"]
