"""Expense ORM model for shared group spending."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Numeric, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from settleup.models import Base, BaseModel

# Association table: which users share an expense
expense_participants = Table(
    "expense_participants",
    Base.metadata,
    Column("expense_id", ForeignKey("expenses.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id"), primary_key=True),
)


class Expense(Base, BaseModel):
    """Model representing one payment made by a member on behalf of others.

    The amount is split evenly across ``participants``. ``per_person_share`` is
    stored rounded for display; balance calculations recompute the share from
    ``amount`` so rounding does not compound across expenses.
    """

    __tablename__ = "expenses"

    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id"),
        nullable=False,
        index=True,
        comment="Owning group",
    )
    paid_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="User who paid",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Total amount paid",
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    expense_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        comment="When the expense happened (scope day is derived from it)",
    )
    per_person_share: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Rounded share for display only",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Soft-delete flag; inactive expenses are ignored",
    )

    paid_by: Mapped["User"] = relationship("User", foreign_keys=[paid_by_id])  # noqa: F821
    participants: Mapped[list["User"]] = relationship(  # noqa: F821
        "User",
        secondary=expense_participants,
        order_by="User.id",
    )

    __table_args__ = (Index("idx_expense_group_date", "group_id", "expense_date"),)

    @property
    def participant_ids(self) -> list[int]:
        return [user.id for user in self.participants]

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, group_id={self.group_id}, paid_by_id={self.paid_by_id}, "
            f"amount={self.amount}, date={self.expense_date}, active={self.is_active})>"
        )


__all__ = ["Expense", "expense_participants"]
