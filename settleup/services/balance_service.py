"""Balance calculation service for group expense scopes.

Balance Formula: Paid - Owed + Sent - Received
- Paid: total of expenses the member paid for
- Owed: member's share of every expense they take part in (amount / participants)
- Sent/Received: settlements that left PENDING (awaiting confirmation or settled)

Positive balance = creditor (is owed money), negative = debtor.
PENDING settlements are proposals from an earlier run, not money movement,
so they are never counted.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from settleup.models import Expense, Settlement, SettlementStatus

logger = logging.getLogger(__name__)

EPSILON = Decimal("0.01")
CENT = Decimal("0.01")


def round_cents(value: Decimal) -> Decimal:
    """Round to whole cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class ParticipantBalance:
    """Running totals for one participant within a scope."""

    participant_id: int
    paid: Decimal = Decimal("0")
    owed: Decimal = Decimal("0")
    sent: Decimal = Decimal("0")
    received: Decimal = Decimal("0")

    @property
    def net_settled(self) -> Decimal:
        return self.sent - self.received

    @property
    def balance(self) -> Decimal:
        return self.paid - self.owed + self.net_settled


@dataclass(frozen=True)
class MemberOverview:
    """Rounded per-member summary for a whole group."""

    user_id: int
    total_paid: Decimal
    total_owed: Decimal
    net_settled: Decimal
    balance: Decimal
    should_pay: bool


class BalanceService:
    """Fold expenses and executed settlements into per-participant balances."""

    def __init__(self, db: Optional[Session] = None):
        """Initialize balance service.

        Args:
            db: SQLAlchemy session, only needed for member_overview
        """
        self.db = db

    @staticmethod
    def aggregate(
        expenses: Iterable[Expense],
        settlements: Iterable[Settlement],
    ) -> Dict[int, ParticipantBalance]:
        """Aggregate expenses and settlements into participant balances.

        Shares are kept at full precision (no rounding) so that uneven splits
        such as 100 / 3 do not drift when many expenses are summed.

        Args:
            expenses: Expenses of the scope; inactive ones are skipped
            settlements: All settlements of the scope, any status

        Returns:
            Dict mapping participant id to ParticipantBalance, in first-seen order
        """
        balances: Dict[int, ParticipantBalance] = {}

        def entry(participant_id: int) -> ParticipantBalance:
            if participant_id not in balances:
                balances[participant_id] = ParticipantBalance(participant_id)
            return balances[participant_id]

        for expense in expenses:
            if not expense.is_active:
                continue
            participant_ids = expense.participant_ids
            if not participant_ids:
                logger.warning(f"Expense {expense.id} has no participants, skipping")
                continue

            amount = Decimal(expense.amount)
            entry(expense.paid_by_id).paid += amount

            share = amount / len(participant_ids)
            for participant_id in participant_ids:
                entry(participant_id).owed += share

        for settlement in settlements:
            if settlement.status == SettlementStatus.PENDING:
                continue
            amount = Decimal(settlement.amount)
            entry(settlement.from_user_id).sent += amount
            entry(settlement.to_user_id).received += amount

        return balances

    @classmethod
    def net_balances(
        cls,
        expenses: Iterable[Expense],
        settlements: Iterable[Settlement],
    ) -> Dict[int, Decimal]:
        """Same as aggregate, reduced to participant id -> signed balance."""
        return {
            participant_id: totals.balance
            for participant_id, totals in cls.aggregate(expenses, settlements).items()
        }

    def member_overview(self, group_id: int, member_ids: List[int]) -> List[MemberOverview]:
        """Summarize every member's position across all days of a group.

        Args:
            group_id: Group to summarize
            member_ids: Members to report, in display order

        Returns:
            One MemberOverview per member (members with no activity get zeros)

        Raises:
            ValueError: If the service was created without a session
        """
        if self.db is None:
            raise ValueError("member_overview requires a database session")

        expenses = (
            self.db.execute(
                select(Expense)
                .options(selectinload(Expense.participants))
                .where(Expense.group_id == group_id, Expense.is_active.is_(True))
            )
            .scalars()
            .all()
        )
        settlements = (
            self.db.execute(
                select(Settlement).where(
                    Settlement.group_id == group_id,
                    Settlement.status != SettlementStatus.PENDING,
                )
            )
            .scalars()
            .all()
        )
        totals = self.aggregate(expenses, settlements)

        overview = []
        for member_id in member_ids:
            member = totals.get(member_id, ParticipantBalance(member_id))
            balance = member.balance
            overview.append(
                MemberOverview(
                    user_id=member_id,
                    total_paid=round_cents(member.paid),
                    total_owed=round_cents(member.owed),
                    net_settled=round_cents(member.net_settled),
                    balance=round_cents(balance),
                    should_pay=balance < -EPSILON,
                )
            )
        return overview


__all__ = [
    "EPSILON",
    "CENT",
    "round_cents",
    "ParticipantBalance",
    "MemberOverview",
    "BalanceService",
]
