from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from ..database import get_session
from ..dependencies import get_current_user, get_event_emitter, require_official
from ..limiter import moderate_limit, strict_limit
from ..models.user import User
from ..schemas import (
    AdvanceRequest,
    DisputeRequest,
    DisputeResponse,
    DisputeView,
    MatchView,
    ReportRequest,
    ResolveDisputeRequest,
)
from ..services import matches
from ..services.events import EventEmitter
from ..services.views import build_match_view

router = APIRouter(prefix="/api/matches")


@router.get("/{match_id}", response_model=MatchView)
async def get_match(
    match_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    match = matches.get_match(db, match_id)
    return build_match_view(db, match, current_user)


@router.post("/{match_id}/status", response_model=MatchView)
async def advance_match(
    match_id: int,
    payload: AdvanceRequest,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    """Scheduling hook: scheduled -> ready -> live."""
    match = matches.advance(db, match_id, current_user, payload.status)
    return build_match_view(db, match, current_user)


@router.post("/{match_id}/report", response_model=MatchView)
@moderate_limit
async def report_match(
    request: Request,
    match_id: int,
    payload: ReportRequest,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    match = matches.report(db, match_id, current_user, payload.score1, payload.score2)
    return build_match_view(db, match, current_user)


@router.post("/{match_id}/confirm", response_model=MatchView)
@moderate_limit
async def confirm_match(
    request: Request,
    match_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_event_emitter),
    db: Session = Depends(get_session)
):
    match = matches.confirm(db, match_id, current_user, emitter=emitter)
    return build_match_view(db, match, current_user)


@router.post("/{match_id}/dispute", response_model=DisputeResponse)
@strict_limit
async def dispute_match(
    request: Request,
    match_id: int,
    payload: DisputeRequest,
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_session)
):
    match = matches.dispute(db, match_id, current_user, payload.reason, payload.evidence)
    return DisputeResponse(message="Dispute opened", match=build_match_view(db, match, current_user))


@router.post("/{match_id}/resolve", response_model=MatchView)
async def resolve_dispute(
    match_id: int,
    payload: ResolveDisputeRequest,
    current_user: Optional[User] = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_event_emitter),
    db: Session = Depends(get_session)
):
    """Official override closing a dispute."""
    match = matches.resolve_dispute(
        db,
        match_id,
        current_user,
        score1=payload.score1,
        score2=payload.score2,
        resolution=payload.resolution,
        emitter=emitter
    )
    return build_match_view(db, match, current_user)


@router.get("/{match_id}/disputes", response_model=List[DisputeView])
async def match_disputes(
    match_id: int,
    current_user: User = Depends(require_official),
    db: Session = Depends(get_session)
):
    matches.get_match(db, match_id)
    return matches.list_disputes(db, match_id)
