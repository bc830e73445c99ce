from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    READY = "ready"
    LIVE = "live"
    REPORTED = "reported"
    RESOLVED = "resolved"
    DISPUTED = "disputed"


class Match(SQLModel, table=True):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("tournament_id", "round", "bracket_pos", name="unique_bracket_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournaments.id", index=True)
    round: int = Field(index=True)  # 1-based
    bracket_pos: int = Field(default=0)  # slot within the round

    # Teams (None = TBD or bye)
    team1_id: Optional[int] = Field(default=None, foreign_key="teams.id")
    team2_id: Optional[int] = Field(default=None, foreign_key="teams.id")

    score1: Optional[int] = Field(default=None)
    score2: Optional[int] = Field(default=None)
    winner_id: Optional[int] = Field(default=None, foreign_key="teams.id")

    status: str = Field(default=MatchStatus.SCHEDULED.value, index=True)

    reported_by: Optional[int] = Field(default=None, foreign_key="users.id")
    reported_at: Optional[datetime] = Field(default=None)
    resolved_by: Optional[int] = Field(default=None, foreign_key="users.id")
    resolved_at: Optional[datetime] = Field(default=None)
