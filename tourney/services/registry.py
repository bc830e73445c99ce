"""
Team registry: registration, approval, roster and check-in.

Check-in is the only mutation participants perform here; everything else is
an official action.
"""
import logging
import secrets
from typing import List, Optional
from sqlmodel import Session, select, func

from ..config import CHECK_IN_CODE_BYTES
from ..errors import (
    CheckInClosed,
    DuplicateTeamName,
    InvalidInput,
    NotApproved,
    NotFound,
    RegistrationClosed,
    TournamentFull,
    TournamentMismatch,
)
from ..models.team import Team, TeamMember, TeamStatus
from ..models.user import User
from . import audit
from .authorization import require_official
from .events import CHECKIN, EventEmitter
from .tournaments import get_tournament

logger = logging.getLogger(__name__)


def get_team(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise NotFound("Team not found")
    return team


def list_teams(db: Session, tournament_id: int) -> List[Team]:
    statement = select(Team).where(Team.tournament_id == tournament_id).order_by(Team.id)
    return list(db.exec(statement).all())


def list_eligible_teams(db: Session, tournament_id: int) -> List[Team]:
    """Teams that are approved and checked in."""
    statement = (
        select(Team)
        .where(
            Team.tournament_id == tournament_id,
            Team.status == TeamStatus.APPROVED.value,
            Team.is_checked_in == True  # noqa: E712
        )
        .order_by(Team.id)
    )
    return list(db.exec(statement).all())


def list_team_members(db: Session, team_id: int) -> List[TeamMember]:
    statement = select(TeamMember).where(TeamMember.team_id == team_id).order_by(TeamMember.id)
    return list(db.exec(statement).all())


def team_user_ids(db: Session, team: Team) -> List[int]:
    """Captain plus roster, without duplicates, captain first."""
    user_ids: List[int] = []
    if team.captain_user_id is not None:
        user_ids.append(team.captain_user_id)
    for member in list_team_members(db, team.id):
        if member.user_id not in user_ids:
            user_ids.append(member.user_id)
    return user_ids


def generate_check_in_code(db: Session) -> str:
    """Random upper-case hex code that no team has ever held."""
    while True:
        code = secrets.token_hex(CHECK_IN_CODE_BYTES).upper()
        existing = db.exec(select(Team.id).where(Team.check_in_code == code)).first()
        if existing is None:
            return code


def register_team(
    db: Session,
    tournament_id: int,
    name: str,
    captain_name: str,
    captain: Optional[User] = None,
    email: Optional[str] = None
) -> Team:
    tournament = get_tournament(db, tournament_id)
    if not tournament.registration_open:
        raise RegistrationClosed()

    name = name.strip()
    captain_name = captain_name.strip()
    if not name or not captain_name:
        raise InvalidInput("Team name and captain name are required")

    existing = db.exec(
        select(Team).where(
            Team.tournament_id == tournament_id,
            func.lower(Team.name) == name.lower()
        )
    ).first()
    if existing:
        raise DuplicateTeamName()

    registered = db.exec(
        select(func.count(Team.id)).where(
            Team.tournament_id == tournament_id,
            Team.status != TeamStatus.REJECTED.value
        )
    ).one()
    if registered >= tournament.max_teams:
        raise TournamentFull()

    team = Team(
        tournament_id=tournament_id,
        name=name,
        captain_user_id=captain.id if captain else None,
        captain_name=captain_name,
        discord_id=captain.discord_id if captain else None,
        email=email or (captain.email if captain else None),
        check_in_code=generate_check_in_code(db)
    )
    db.add(team)
    db.flush()

    if captain:
        db.add(TeamMember(team_id=team.id, user_id=captain.id, role="captain"))

    audit.record(
        db,
        captain.id if captain else None,
        "team_register",
        "team",
        team.id,
        {"tournament_id": tournament_id, "name": name}
    )
    db.commit()
    db.refresh(team)

    logger.info("team %s registered for tournament %s", team.id, tournament_id)
    return team


def set_team_status(db: Session, team_id: int, status: TeamStatus, actor: Optional[User]) -> Team:
    """Approve or reject a team."""
    actor = require_official(actor)
    team = get_team(db, team_id)

    previous = team.status
    team.status = status.value
    db.add(team)
    action = "team_approve" if status == TeamStatus.APPROVED else "team_reject"
    audit.record(db, actor.id, action, "team", team.id, {"from": previous, "to": status.value})
    db.commit()
    db.refresh(team)

    logger.info("team %s %s by user %s", team.id, status.value, actor.id)
    return team


def add_team_member(db: Session, team_id: int, user_id: int, actor: Optional[User]) -> TeamMember:
    actor = require_official(actor)
    team = get_team(db, team_id)
    if not db.get(User, user_id):
        raise NotFound("User not found")

    existing = db.exec(
        select(TeamMember).where(
            TeamMember.team_id == team.id,
            TeamMember.user_id == user_id
        )
    ).first()
    if existing:
        raise InvalidInput("User is already a member of this team")

    member = TeamMember(team_id=team.id, user_id=user_id)
    db.add(member)
    audit.record(db, actor.id, "team_member_add", "team", team.id, {"user_id": user_id})
    db.commit()
    db.refresh(member)
    return member


def check_in(
    db: Session,
    tournament_id: int,
    code: str,
    emitter: Optional[EventEmitter] = None,
    actor: Optional[User] = None
) -> Team:
    """
    Check a team in by its code.

    Errors, in evaluation order:
        InvalidInput: empty code
        NotFound: no team owns the code
        TournamentMismatch: the code belongs to another tournament
        CheckInClosed: the owning tournament's check-in gate is closed
        NotApproved: the team is not approved
    """
    code = (code or "").strip().upper()
    if not code:
        raise InvalidInput("Check-in code is required")

    team = db.exec(select(Team).where(Team.check_in_code == code)).first()
    if not team:
        raise NotFound("Invalid check-in code")
    if team.tournament_id != tournament_id:
        raise TournamentMismatch()

    tournament = get_tournament(db, team.tournament_id)
    if not tournament.check_in_open:
        raise CheckInClosed()
    if team.status != TeamStatus.APPROVED.value:
        raise NotApproved()

    if team.is_checked_in:
        return team

    team.is_checked_in = True
    db.add(team)
    audit.record(db, actor.id if actor else None, "team_checkin", "team", team.id, {"tournament_id": tournament_id})
    db.commit()
    db.refresh(team)

    logger.info("team %s checked in for tournament %s", team.id, tournament_id)

    if emitter is not None and team.captain_user_id is not None:
        emitter.emit(CHECKIN, team.captain_user_id)

    return team
