from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_admin, require_official
from ..models.user import User
from ..schemas import AuditLogResponse, DiscordLinkRequest, UserResponse
from ..services import audit
from ..services.auth import link_discord_id

router = APIRouter(prefix="/api/admin")


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def audit_logs(
    limit: int = Query(default=50, ge=1, le=500),
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    """Review who authorized which state change, newest first."""
    entries = audit.list_entries(db, limit=limit, entity_type=entity_type, entity_id=entity_id)
    return [
        AuditLogResponse(
            id=entry.id,
            actor_user_id=entry.actor_user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            payload=audit.decode_payload(entry),
            created_at=entry.created_at
        )
        for entry in entries
    ]


@router.patch("/users/{user_id}/discord", response_model=UserResponse)
async def link_discord(
    user_id: int,
    payload: DiscordLinkRequest,
    current_user: User = Depends(require_official),
    db: Session = Depends(get_session)
):
    """Link a Discord account once it has been verified out of band."""
    return link_discord_id(db, user_id, payload.discord_id, current_user)
