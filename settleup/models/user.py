"""User ORM model (settlement participant)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from settleup.models import Base, BaseModel


class User(Base, BaseModel):
    """A person who pays for or shares in group expenses.

    The settlement engine only relies on the primary key; the name is kept
    for CLI output and logs.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"


__all__ = ["User"]
