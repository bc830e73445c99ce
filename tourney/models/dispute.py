from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Dispute(SQLModel, table=True):
    __tablename__ = "disputes"

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="matches.id", index=True)
    opened_by: int = Field(foreign_key="users.id")
    reason: str
    evidence: Optional[str] = Field(default=None)
    status: str = Field(default="open")  # open, closed
    resolution: Optional[str] = Field(default=None)
    resolved_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    closed_at: Optional[datetime] = Field(default=None)
