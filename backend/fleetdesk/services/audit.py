"""Audit trail helpers."""

from typing import Any, Optional

from sqlalchemy.orm import Session

from backend.fleetdesk.models.audit_log import AuditLog


def log_audit(
    db: Session,
    *,
    tenant_id: int,
    user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: int,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """Stage an audit entry on the session; the caller's commit persists it with the change."""
    entry = AuditLog(
        tenant_id=tenant_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    db.add(entry)
    return entry
