"""Greedy debt matching: turn net balances into pairwise transfers.

The largest debtor pays the largest creditor until one of them is square,
then the next one steps in. This is not a provably minimal solution but it
never needs more than (participants - 1) transfers and always closes every
balance to within EPSILON.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Mapping

from settleup.services.balance_service import EPSILON, round_cents


@dataclass(frozen=True)
class Transfer:
    """A payment the debtor should make to the creditor."""

    from_user_id: int
    to_user_id: int
    amount: Decimal

    @property
    def pair(self) -> tuple[int, int]:
        return (self.from_user_id, self.to_user_id)


def match_debts(balances: Mapping[int, Decimal]) -> List[Transfer]:
    """Match debtors to creditors.

    Debtors are ordered most negative first and creditors largest first.
    Equal balances are ordered by participant id so runs are reproducible.

    Args:
        balances: Participant id -> signed balance (positive = owed money)

    Returns:
        Transfers in emission order; amounts rounded to cents, never zero
    """
    debtors = [[pid, balance] for pid, balance in balances.items() if balance < -EPSILON]
    creditors = [[pid, balance] for pid, balance in balances.items() if balance > EPSILON]

    debtors.sort(key=lambda item: (item[1], item[0]))
    creditors.sort(key=lambda item: (-item[1], item[0]))

    transfers: List[Transfer] = []
    i = 0
    j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(-debtor[1], creditor[1])
        rounded = round_cents(amount)
        if rounded > 0:
            transfers.append(Transfer(debtor[0], creditor[0], rounded))

        # Running balances move by the unrounded amount
        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < EPSILON:
            i += 1
        if creditor[1] < EPSILON:
            j += 1

    return transfers


__all__ = ["Transfer", "match_debts"]
