"""Settlement ORM model: one suggested or executed member-to-member payment."""

from datetime import date
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Date, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from settleup.models import Base, BaseModel


class SettlementStatus(PyEnum):
    """Settlement lifecycle.

    PENDING -> AWAITING_CONFIRMATION when the payer attaches proof of payment,
    back to PENDING if the payer cancels, and SETTLED once the receiver
    confirms. SETTLED is terminal.
    """

    PENDING = "pending"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SETTLED = "settled"


class PaymentMethod(PyEnum):
    """How the payer says they paid."""

    CASH = "cash"
    UPI = "upi"
    NET = "net"
    OTHER = "other"


class Settlement(Base, BaseModel):
    """
    Ledger entry for a transfer from ``from_user`` to ``to_user``.

    Only PENDING rows are owned by the recalculation engine. Rows in any
    other status are real money movement and are never changed by it.
    """

    __tablename__ = "settlements"

    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id"), nullable=False, index=True, comment="Owning group"
    )
    from_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True, comment="Payer (debtor)"
    )
    to_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True, comment="Receiver (creditor)"
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Transfer amount",
    )
    status: Mapped[SettlementStatus] = mapped_column(
        Enum(SettlementStatus, native_enum=False),
        default=SettlementStatus.PENDING,
        nullable=False,
        index=True,
        comment="Status: pending/awaiting_confirmation/settled",
    )
    settlement_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Scope day this settlement belongs to",
    )
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, native_enum=False),
        nullable=True,
        comment="Set by the payer when initiating",
    )
    reference_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Payment reference supplied by the payer"
    )

    __table_args__ = (
        Index("idx_settlement_scope", "group_id", "settlement_date"),
        Index("idx_settlement_scope_status", "group_id", "settlement_date", "status"),
    )

    @property
    def pair(self) -> tuple[int, int]:
        return (self.from_user_id, self.to_user_id)

    def __repr__(self) -> str:
        return (
            f"<Settlement(id={self.id}, group_id={self.group_id}, "
            f"{self.from_user_id}->{self.to_user_id}, amount={self.amount}, "
            f"status={self.status.value}, date={self.settlement_date})>"
        )


__all__ = ["Settlement", "SettlementStatus", "PaymentMethod"]
