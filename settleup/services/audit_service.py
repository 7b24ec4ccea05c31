"""Audit service for recording recalculation outcomes."""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from settleup.models.audit_log import AuditLog

SCOPE_ENTITY = "settlement_scope"


class AuditService:
    """Service for audit log operations.

    Provides static methods to create and look up minimal audit log entries.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        changes: dict | None = None,
        scope_date: date | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            db: Database session
            entity_type: Type of entity ("settlement_scope")
            entity_id: Primary key of the entity
            action: Action performed ("recalc", "recalc_failed", ...)
            changes: Optional JSON payload
            scope_date: Scope day for settlement_scope entries

        Returns:
            Created AuditLog object (added, not committed)
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            scope_date=scope_date,
            action=action,
            changes=changes,
        )
        db.add(audit)
        return audit

    @staticmethod
    def last_scope_entry(db: Session, group_id: int, day: date) -> Optional[AuditLog]:
        """Most recent audit entry for a (group, day) scope, if any."""
        return db.execute(
            select(AuditLog)
            .where(
                AuditLog.entity_type == SCOPE_ENTITY,
                AuditLog.entity_id == group_id,
                AuditLog.scope_date == day,
            )
            .order_by(AuditLog.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    @staticmethod
    def failed_scopes(db: Session) -> List[Tuple[int, date]]:
        """Scopes whose latest audit entry is "recalc_failed".

        Returns:
            (group_id, day) pairs, ordered by group then day
        """
        latest = (
            select(func.max(AuditLog.id).label("id"))
            .where(AuditLog.entity_type == SCOPE_ENTITY, AuditLog.scope_date.is_not(None))
            .group_by(AuditLog.entity_id, AuditLog.scope_date)
            .subquery()
        )
        rows = db.execute(
            select(AuditLog.entity_id, AuditLog.scope_date)
            .join(latest, AuditLog.id == latest.c.id)
            .where(AuditLog.action == "recalc_failed")
            .order_by(AuditLog.entity_id, AuditLog.scope_date)
        ).all()
        return [(group_id, day) for group_id, day in rows]


__all__ = ["AuditService", "SCOPE_ENTITY"]
