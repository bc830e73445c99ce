from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from ..errors import InvalidInput, NotFound
from ..models.tournament import Tournament, TournamentStatus
from ..models.user import User
from . import audit
from .authorization import require_admin

EDITABLE_FIELDS = {
    "name",
    "starts_at",
    "ends_at",
    "max_teams",
    "bracket_size",
    "registration_open",
    "check_in_open",
    "status",
}


def validate_bracket_size(bracket_size: int) -> None:
    """Single elimination needs a power of two, at least one match."""
    if bracket_size < 2 or bracket_size & (bracket_size - 1):
        raise InvalidInput("Bracket size must be a power of two and at least 2")


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_window(starts_at: datetime, ends_at: Optional[datetime]) -> None:
    if ends_at is not None and _naive_utc(ends_at) < _naive_utc(starts_at):
        raise InvalidInput("Tournament cannot end before it starts")


def list_tournaments(db: Session) -> List[Tournament]:
    return list(db.exec(select(Tournament).order_by(Tournament.starts_at.desc())).all())


def get_tournament(db: Session, tournament_id: int) -> Tournament:
    tournament = db.get(Tournament, tournament_id)
    if not tournament:
        raise NotFound("Tournament not found")
    return tournament


def create_tournament(db: Session, actor: Optional[User], **fields: Any) -> Tournament:
    actor = require_admin(actor)
    tournament = Tournament(**fields)
    validate_bracket_size(tournament.bracket_size)
    validate_window(tournament.starts_at, tournament.ends_at)
    if tournament.max_teams < 2:
        raise InvalidInput("A tournament needs room for at least 2 teams")

    db.add(tournament)
    db.flush()
    audit.record(db, actor.id, "tournament_create", "tournament", tournament.id, {"name": tournament.name})
    db.commit()
    db.refresh(tournament)
    return tournament


def update_tournament(db: Session, tournament_id: int, actor: Optional[User], changes: Dict[str, Any]) -> Tournament:
    """Admin edit of gates, sizes, schedule and lifecycle status."""
    actor = require_admin(actor)
    tournament = get_tournament(db, tournament_id)

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidInput(f"Unknown tournament fields: {', '.join(sorted(unknown))}")

    if "bracket_size" in changes:
        validate_bracket_size(changes["bracket_size"])
    if "status" in changes:
        try:
            changes["status"] = TournamentStatus(changes["status"]).value
        except ValueError as exc:
            raise InvalidInput(f"Unknown tournament status: {changes['status']}") from exc
    validate_window(changes.get("starts_at", tournament.starts_at), changes.get("ends_at", tournament.ends_at))

    for field, value in changes.items():
        setattr(tournament, field, value)

    db.add(tournament)
    audit.record(db, actor.id, "tournament_update", "tournament", tournament.id, changes)
    db.commit()
    db.refresh(tournament)
    return tournament
