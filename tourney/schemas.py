from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .config import DEFAULT_BRACKET_SIZE, DEFAULT_MAX_TEAMS
from .models.match import MatchStatus
from .models.tournament import TournamentStatus


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; Python code keeps snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Auth

class RegisterRequest(CamelModel):
    username: str
    password: str
    email: Optional[str] = None


class LoginRequest(CamelModel):
    username: str
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    role: str
    discord_id: Optional[str] = None


class DiscordLinkRequest(CamelModel):
    # None unlinks the account
    discord_id: Optional[str] = None


# Tournaments

class TournamentCreate(CamelModel):
    name: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    max_teams: int = DEFAULT_MAX_TEAMS
    bracket_size: int = DEFAULT_BRACKET_SIZE
    registration_open: bool = True
    check_in_open: bool = False


class TournamentUpdate(CamelModel):
    name: Optional[str] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_teams: Optional[int] = None
    bracket_size: Optional[int] = None
    registration_open: Optional[bool] = None
    check_in_open: Optional[bool] = None
    status: Optional[TournamentStatus] = None


class TournamentResponse(CamelModel):
    id: int
    name: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    max_teams: int
    bracket_size: int
    registration_open: bool
    check_in_open: bool
    status: str


class BracketResponse(CamelModel):
    message: str
    matches_created: int


# Teams

class TeamRegisterRequest(CamelModel):
    name: str
    captain_name: str
    email: Optional[str] = None


class TeamResponse(CamelModel):
    id: int
    tournament_id: int
    name: str
    captain_user_id: Optional[int] = None
    captain_name: str
    status: str
    is_checked_in: bool
    registered_at: datetime


class TeamRegisteredResponse(CamelModel):
    id: int
    name: str
    check_in_code: str
    message: str


class TeamMemberRequest(CamelModel):
    user_id: int


class TeamMemberResponse(CamelModel):
    user_id: int
    username: Optional[str] = None
    role: str


class CheckInRequest(CamelModel):
    code: str = ""


class CheckInResponse(CamelModel):
    team_id: int
    name: str
    message: str


# Matches

class TeamSummary(CamelModel):
    id: int
    name: str


class MatchView(CamelModel):
    id: int
    tournament_id: int
    round: int
    bracket_pos: int
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    score1: Optional[int] = None
    score2: Optional[int] = None
    winner_id: Optional[int] = None
    status: str
    reported_by: Optional[int] = None
    reported_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    resolved_at: Optional[datetime] = None

    team1: Optional[TeamSummary] = None
    team2: Optional[TeamSummary] = None
    team1_members: List[TeamMemberResponse] = []
    team2_members: List[TeamMemberResponse] = []

    # Computed for the requesting identity
    can_modify: bool = False
    is_participant: bool = False
    user_team_id: Optional[int] = None


class ReportRequest(CamelModel):
    # Validated by the engine so malformed scores surface as InvalidScore
    score1: Any = None
    score2: Any = None


class DisputeRequest(CamelModel):
    reason: str = ""
    evidence: Optional[str] = None


class DisputeResponse(CamelModel):
    message: str
    match: MatchView


class DisputeView(CamelModel):
    id: int
    match_id: int
    opened_by: int
    reason: str
    evidence: Optional[str] = None
    status: str
    resolution: Optional[str] = None
    resolved_by: Optional[int] = None
    created_at: datetime
    closed_at: Optional[datetime] = None


class ResolveDisputeRequest(CamelModel):
    score1: Optional[Any] = None
    score2: Optional[Any] = None
    resolution: Optional[str] = None


class AdvanceRequest(CamelModel):
    status: MatchStatus


# Admin

class AuditLogResponse(CamelModel):
    id: int
    actor_user_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    payload: Optional[Any] = None
    created_at: datetime
