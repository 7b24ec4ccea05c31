"""Reconcile freshly matched transfers against the pending settlement ledger.

Only PENDING settlements take part: matching pairs are updated in place,
missing pairs are created, and pending rows nobody asked for are deleted.
Rows awaiting confirmation or settled are never read here, let alone written.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from settleup.models import Settlement, SettlementStatus
from settleup.services.debt_matcher import Transfer
from settleup.services.errors import LedgerWriteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementUpdate:
    """New amount for an existing pending settlement."""

    settlement_id: int
    amount: Decimal
    previous_amount: Decimal


@dataclass
class ReconciliationPlan:
    """Staged ledger mutations for one scope."""

    creates: List[Transfer] = field(default_factory=list)
    updates: List[SettlementUpdate] = field(default_factory=list)
    deletes: List[int] = field(default_factory=list)
    unchanged: List[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    def summary(self) -> Dict[str, int]:
        return {
            "created": len(self.creates),
            "updated": len(self.updates),
            "deleted": len(self.deletes),
            "unchanged": len(self.unchanged),
        }


class ReconciliationService:
    """Diff transfers against pending settlements and apply the result."""

    def __init__(self, db: Session):
        """Initialize with database session.

        Args:
            db: Session the mutations are staged on
        """
        self.db = db

    @staticmethod
    def plan(transfers: Iterable[Transfer], pending: Iterable[Settlement]) -> ReconciliationPlan:
        """Build the create/update/delete plan.

        Transfers and pending settlements are keyed by (from_user, to_user).
        If several pending rows share a pair, the lowest id is kept and the
        others are deleted.

        Args:
            transfers: Output of match_debts
            pending: Existing settlements of the scope; non-pending rows are ignored

        Returns:
            ReconciliationPlan
        """
        pending_rows = sorted(
            (s for s in pending if s.status == SettlementStatus.PENDING),
            key=lambda s: s.id,
        )
        by_pair: Dict[Tuple[int, int], Settlement] = {}
        for settlement in pending_rows:
            by_pair.setdefault(settlement.pair, settlement)

        plan = ReconciliationPlan()
        touched = set()
        for transfer in transfers:
            existing = by_pair.get(transfer.pair)
            if existing is None:
                plan.creates.append(transfer)
                continue

            touched.add(existing.id)
            previous = Decimal(existing.amount)
            if previous == transfer.amount:
                plan.unchanged.append(existing.id)
            else:
                plan.updates.append(
                    SettlementUpdate(
                        settlement_id=existing.id,
                        amount=transfer.amount,
                        previous_amount=previous,
                    )
                )

        plan.deletes = [s.id for s in pending_rows if s.id not in touched]
        return plan

    def apply(self, plan: ReconciliationPlan, group_id: int, day: date) -> None:
        """Stage every mutation of the plan and flush them together.

        Updates and deletes only match rows that are still PENDING, so a
        settlement a payer initiated in the meantime is left alone.
        The caller owns the commit.

        Raises:
            LedgerWriteError: If the database rejects any of the mutations
        """
        if plan.is_empty:
            return

        try:
            self.db.add_all(
                [
                    Settlement(
                        group_id=group_id,
                        from_user_id=transfer.from_user_id,
                        to_user_id=transfer.to_user_id,
                        amount=transfer.amount,
                        status=SettlementStatus.PENDING,
                        settlement_date=day,
                    )
                    for transfer in plan.creates
                ]
            )

            for change in plan.updates:
                self.db.execute(
                    update(Settlement)
                    .where(
                        Settlement.id == change.settlement_id,
                        Settlement.status == SettlementStatus.PENDING,
                    )
                    .values(amount=change.amount)
                    .execution_options(synchronize_session="fetch")
                )

            if plan.deletes:
                self.db.execute(
                    delete(Settlement)
                    .where(
                        Settlement.id.in_(plan.deletes),
                        Settlement.status == SettlementStatus.PENDING,
                    )
                    .execution_options(synchronize_session="fetch")
                )

            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise LedgerWriteError(
                f"Failed to apply settlement plan for group {group_id} on {day}: {e}"
            ) from e

        logger.debug(f"Staged settlement plan for group {group_id} on {day}: {plan.summary()}")


__all__ = ["SettlementUpdate", "ReconciliationPlan", "ReconciliationService"]
