from typing import List, Optional
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ..database import get_session
from ..dependencies import get_current_user, get_event_emitter, require_user
from ..limiter import moderate_limit, strict_limit
from ..models.team import Team
from ..models.user import User
from ..schemas import (
    BracketResponse,
    CheckInRequest,
    CheckInResponse,
    MatchView,
    TeamRegisteredResponse,
    TeamRegisterRequest,
    TeamResponse,
    TournamentCreate,
    TournamentResponse,
    TournamentUpdate,
)
from ..services import bracket, matches, registry, tournaments
from ..services.events import EventEmitter
from ..services.views import build_match_view

router = APIRouter(prefix="/api/tournaments")


@router.get("", response_model=List[TournamentResponse])
async def list_tournaments(db: Session = Depends(get_session)):
    return tournaments.list_tournaments(db)


@router.post("", response_model=TournamentResponse, status_code=status.HTTP_201_CREATED)
async def create_tournament(
    payload: TournamentCreate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    return tournaments.create_tournament(db, current_user, **payload.model_dump())


@router.get("/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: int, db: Session = Depends(get_session)):
    return tournaments.get_tournament(db, tournament_id)


@router.patch("/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(
    tournament_id: int,
    payload: TournamentUpdate,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return tournaments.update_tournament(db, tournament_id, current_user, changes)


# Teams & registration

@router.get("/{tournament_id}/teams", response_model=List[TeamResponse])
async def list_teams(tournament_id: int, db: Session = Depends(get_session)):
    tournaments.get_tournament(db, tournament_id)
    return registry.list_teams(db, tournament_id)


@router.post(
    "/{tournament_id}/register",
    response_model=TeamRegisteredResponse,
    status_code=status.HTTP_201_CREATED
)
@strict_limit
async def register_team(
    request: Request,
    tournament_id: int,
    payload: TeamRegisterRequest,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team: Team = registry.register_team(
        db,
        tournament_id,
        name=payload.name,
        captain_name=payload.captain_name,
        captain=current_user,
        email=payload.email
    )
    return TeamRegisteredResponse(
        id=team.id,
        name=team.name,
        check_in_code=team.check_in_code,
        message="Team registered successfully! Keep your check-in code for tournament day."
    )


@router.post("/{tournament_id}/check-in", response_model=CheckInResponse)
@moderate_limit
async def check_in(
    request: Request,
    tournament_id: int,
    payload: CheckInRequest,
    current_user: Optional[User] = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_event_emitter),
    db: Session = Depends(get_session)
):
    team = registry.check_in(db, tournament_id, payload.code, emitter=emitter, actor=current_user)
    return CheckInResponse(
        team_id=team.id,
        name=team.name,
        message="Check-in successful! Your team is ready."
    )


# Bracket & matches

@router.get("/{tournament_id}/matches", response_model=List[MatchView])
async def list_matches(
    tournament_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    tournaments.get_tournament(db, tournament_id)
    return [
        build_match_view(db, match, current_user)
        for match in matches.list_matches(db, tournament_id)
    ]


@router.post(
    "/{tournament_id}/generate-bracket",
    response_model=BracketResponse,
    status_code=status.HTTP_201_CREATED
)
async def generate_bracket(
    tournament_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    created = bracket.generate_bracket(db, tournament_id, current_user)
    return BracketResponse(message="Bracket generated successfully", matches_created=len(created))
