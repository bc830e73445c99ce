from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field

from ..config import DEFAULT_BRACKET_SIZE, DEFAULT_MAX_TEAMS


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    LIVE = "live"
    COMPLETED = "completed"


class Tournament(SQLModel, table=True):
    __tablename__ = "tournaments"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)

    # Scheduling window
    starts_at: datetime
    ends_at: Optional[datetime] = Field(default=None)

    max_teams: int = Field(default=DEFAULT_MAX_TEAMS)
    bracket_size: int = Field(default=DEFAULT_BRACKET_SIZE)

    # Independent admin-controlled gates
    registration_open: bool = Field(default=True)
    check_in_open: bool = Field(default=False)

    status: str = Field(default=TournamentStatus.UPCOMING.value, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
