"""Group ORM model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from settleup.models import Base, BaseModel


class Group(Base, BaseModel):
    """Group whose members share expenses. Membership is managed elsewhere."""

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Group name")

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name})>"


__all__ = ["Group"]
