from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ..database import get_session
from ..dependencies import get_current_user
from ..models.team import TeamStatus
from ..models.user import User
from ..schemas import TeamMemberRequest, TeamMemberResponse, TeamResponse
from ..services import registry
from ..services.views import roster

router = APIRouter(prefix="/api/teams")


@router.patch("/{team_id}/approve", response_model=TeamResponse)
async def approve_team(
    team_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    return registry.set_team_status(db, team_id, TeamStatus.APPROVED, current_user)


@router.patch("/{team_id}/reject", response_model=TeamResponse)
async def reject_team(
    team_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    return registry.set_team_status(db, team_id, TeamStatus.REJECTED, current_user)


@router.get("/{team_id}/members", response_model=List[TeamMemberResponse])
async def team_members(team_id: int, db: Session = Depends(get_session)):
    return roster(db, registry.get_team(db, team_id))


@router.post(
    "/{team_id}/members",
    response_model=List[TeamMemberResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_team_member(
    team_id: int,
    payload: TeamMemberRequest,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    registry.add_team_member(db, team_id, payload.user_id, current_user)
    return roster(db, registry.get_team(db, team_id))
