from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class AuditLogEntry(SQLModel, table=True):
    """Append-only record of an accepted state change."""
    __tablename__ = "audit_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    actor_user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    action: str = Field(max_length=50, index=True)  # match_report, match_confirm, ...
    entity_type: str = Field(max_length=30)
    entity_id: Optional[int] = Field(default=None, index=True)
    payload: Optional[str] = Field(default=None)  # JSON
    created_at: datetime = Field(default_factory=datetime.utcnow)
