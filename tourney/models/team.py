from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class TeamStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Team(SQLModel, table=True):
    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("tournament_id", "check_in_code", name="unique_tournament_check_in_code"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournaments.id", index=True)
    name: str = Field(max_length=100)

    # Roster: the captain is an implicit member
    captain_user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    captain_name: str = Field(max_length=100)
    discord_id: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, max_length=255)

    check_in_code: str = Field(index=True, max_length=12)
    status: str = Field(default=TeamStatus.PENDING.value)
    is_checked_in: bool = Field(default=False)
    registered_at: datetime = Field(default_factory=datetime.utcnow)


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="unique_team_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: str = Field(default="member", max_length=20)  # captain, member
    joined_at: datetime = Field(default_factory=datetime.utcnow)
