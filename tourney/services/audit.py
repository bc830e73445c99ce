"""
Audit trail.

Entries are only ever added; nothing in the code base updates or deletes
them. `record` joins the caller's unit of work instead of committing on its
own, so a state change and its audit entry land in the same transaction.
"""
import json
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from ..models.audit_log import AuditLogEntry


def record(
    db: Session,
    actor_user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Optional[int],
    payload: Optional[Dict[str, Any]] = None
) -> AuditLogEntry:
    entry = AuditLogEntry(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        payload=json.dumps(payload, default=str) if payload is not None else None
    )
    db.add(entry)
    return entry


def list_entries(
    db: Session,
    limit: int = 50,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None
) -> List[AuditLogEntry]:
    """Newest entries first, optionally narrowed to one entity."""
    statement = select(AuditLogEntry)
    if entity_type:
        statement = statement.where(AuditLogEntry.entity_type == entity_type)
    if entity_id is not None:
        statement = statement.where(AuditLogEntry.entity_id == entity_id)
    statement = statement.order_by(AuditLogEntry.created_at.desc(), AuditLogEntry.id.desc()).limit(limit)
    return list(db.exec(statement).all())


def decode_payload(entry: AuditLogEntry) -> Optional[Dict[str, Any]]:
    if entry.payload is None:
        return None
    return json.loads(entry.payload)
