"""Audit log model for recalculation outcomes."""

from datetime import date
from typing import Any

from sqlalchemy import JSON, Date, Index
from sqlalchemy.orm import Mapped, mapped_column

from settleup.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for settlement recalculation runs.

    Records which scope (entity_type, entity_id, scope_date) was processed,
    what happened (action) and an optional JSON payload (changes). Failed
    runs are written here so stale scopes can be found and retried.
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(index=False)
    """Entity type being audited: "settlement_scope"."""

    entity_id: Mapped[int] = mapped_column(index=False)
    """Primary key of the entity being audited (group id for scopes)."""

    scope_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=False)
    """Scope day for settlement_scope entries."""

    action: Mapped[str] = mapped_column(index=False)
    """Action performed: "recalc", "recalc_failed", "recalc_recovered"."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, index=False)
    """Optional JSON payload: {"date": "2026-01-31", "created": 2, "error": "..."}."""

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_scope", "entity_type", "entity_id", "scope_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"scope_date={self.scope_date}, action={self.action}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
