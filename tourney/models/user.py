from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    password_hash: str = Field(max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    # External identity, consulted by the legacy team-membership path
    discord_id: Optional[str] = Field(default=None, unique=True, index=True, max_length=64)
    role: str = Field(default="user", max_length=20)  # user, moderator, admin
    created_at: datetime = Field(default_factory=datetime.utcnow)
