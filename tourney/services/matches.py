"""
Match lifecycle.

    scheduled -> ready -> live -> reported -> resolved
                                           -> disputed -> resolved (official override)

A report is a one-sided claim. It becomes authoritative only when the
opposing side (or an official) confirms it.

Every transition is a compare-and-swap on the persisted status: the UPDATE
only matches when the row still holds the status the preconditions were
checked against. When a concurrent transition got there first the row count
is zero and the caller gets InvalidState with the row untouched. The status
change and its audit entry commit together; reward signals go out only
after that commit.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import update
from sqlmodel import Session, select

from ..config import MAX_SCORE
from ..errors import Forbidden, InvalidInput, InvalidScore, InvalidState, NotFound
from ..models.dispute import Dispute
from ..models.match import Match, MatchStatus
from ..models.team import Team
from ..models.user import User
from . import audit
from .authorization import require_official, require_user, resolve_role, side_of
from .events import MATCH_WIN, EventEmitter
from .registry import team_user_ids

logger = logging.getLogger(__name__)

REPORTABLE = (MatchStatus.READY, MatchStatus.LIVE)

# Forward moves owned by the scheduling side
ADVANCES = {
    MatchStatus.READY: (MatchStatus.SCHEDULED,),
    MatchStatus.LIVE: (MatchStatus.SCHEDULED, MatchStatus.READY),
}


def get_match(db: Session, match_id: int) -> Match:
    match = db.get(Match, match_id)
    if not match:
        raise NotFound("Match not found")
    return match


def list_matches(db: Session, tournament_id: int) -> List[Match]:
    statement = (
        select(Match)
        .where(Match.tournament_id == tournament_id)
        .order_by(Match.round, Match.bracket_pos)
    )
    return list(db.exec(statement).all())


def validate_scores(score1: Any, score2: Any) -> None:
    for score in (score1, score2):
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise InvalidScore("Scores must be non-negative integers")
        if score > MAX_SCORE:
            raise InvalidScore(f"Scores cannot exceed {MAX_SCORE}")


def decide_winner(match: Match, score1: int, score2: int) -> Optional[int]:
    """Side with the strictly higher score; a tie has no winner."""
    if score1 > score2:
        return match.team1_id
    if score2 > score1:
        return match.team2_id
    return None


def _compare_and_swap(
    db: Session,
    match: Match,
    expected: Iterable[MatchStatus],
    values: Dict[str, Any],
    *conditions
) -> None:
    expected_values = [status.value for status in expected]
    statement = (
        update(Match)
        .where(Match.id == match.id, Match.status.in_(expected_values), *conditions)
        .values(**values)
    )
    result = db.exec(statement)
    if result.rowcount != 1:
        db.rollback()
        logger.warning("match %s changed concurrently; transition to %s rejected", match.id, values.get("status"))
        raise InvalidState("Match was modified by another request, reload and retry")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _emit_wins(db: Session, winner_id: Optional[int], emitter: Optional[EventEmitter]) -> None:
    if winner_id is None or emitter is None:
        return
    team = db.get(Team, winner_id)
    if team is None:
        return
    for user_id in team_user_ids(db, team):
        emitter.emit(MATCH_WIN, user_id)


def advance(db: Session, match_id: int, actor: Optional[User], status: MatchStatus) -> Match:
    """Move a match forward through the pre-report states."""
    actor = require_official(actor)
    match = get_match(db, match_id)

    if status not in ADVANCES:
        raise InvalidInput(f"Matches cannot be moved to {status.value} directly")
    expected = ADVANCES[status]
    if match.status not in {s.value for s in expected}:
        raise InvalidState(f"Cannot move a {match.status} match to {status.value}")
    if match.team1_id is None or match.team2_id is None:
        raise InvalidState("Both teams must be known before the match can start")

    previous = match.status
    _compare_and_swap(db, match, expected, {"status": status.value})
    audit.record(db, actor.id, "match_advance", "match", match.id, {"from": previous, "to": status.value})
    _commit(db)

    db.refresh(match)
    return match


def report(db: Session, match_id: int, actor: Optional[User], score1: Any, score2: Any) -> Match:
    actor = require_user(actor)
    validate_scores(score1, score2)
    match = get_match(db, match_id)

    role = resolve_role(db, actor, match)
    if not role.can_modify:
        raise Forbidden("Not authorized to report this match")
    if match.status not in {s.value for s in REPORTABLE}:
        raise InvalidState(f"Cannot report a match in {match.status} status")

    _compare_and_swap(db, match, REPORTABLE, {
        "score1": score1,
        "score2": score2,
        "status": MatchStatus.REPORTED.value,
        "reported_by": actor.id,
        "reported_at": datetime.utcnow(),
    })
    audit.record(db, actor.id, "match_report", "match", match.id, {"score1": score1, "score2": score2})
    _commit(db)

    db.refresh(match)
    logger.info("match %s reported %s-%s by user %s", match.id, score1, score2, actor.id)
    return match


def confirm(db: Session, match_id: int, actor: Optional[User], emitter: Optional[EventEmitter] = None) -> Match:
    actor = require_user(actor)
    match = get_match(db, match_id)

    if match.status != MatchStatus.REPORTED.value:
        raise InvalidState("Match not in reported status")

    role = resolve_role(db, actor, match)
    if not role.official:
        reporter = side_of(db, match.reported_by, match)
        opposing = (reporter.team1 and role.team2) or (reporter.team2 and role.team1)
        if actor.id == match.reported_by or not opposing:
            raise Forbidden("Only the opposing team can confirm the score")

    winner_id = decide_winner(match, match.score1, match.score2)

    _compare_and_swap(
        db,
        match,
        (MatchStatus.REPORTED,),
        {
            "winner_id": winner_id,
            "status": MatchStatus.RESOLVED.value,
            "resolved_by": actor.id,
            "resolved_at": datetime.utcnow(),
        },
        Match.reported_by == match.reported_by
    )
    audit.record(db, actor.id, "match_confirm", "match", match.id, {"winner_id": winner_id})
    _commit(db)

    db.refresh(match)
    logger.info("match %s resolved by user %s, winner %s", match.id, actor.id, winner_id)

    _emit_wins(db, winner_id, emitter)
    return match


def dispute(
    db: Session,
    match_id: int,
    actor: Optional[User],
    reason: str,
    evidence: Optional[str] = None
) -> Match:
    actor = require_user(actor)
    reason = (reason or "").strip()
    if not reason:
        raise InvalidInput("Reason required")
    match = get_match(db, match_id)

    role = resolve_role(db, actor, match)
    if not role.can_modify:
        raise Forbidden("Not authorized to dispute this match")

    # Any status may be disputed; the swap only guards against a racing transition
    _compare_and_swap(db, match, (MatchStatus(match.status),), {"status": MatchStatus.DISPUTED.value})
    db.add(Dispute(match_id=match.id, opened_by=actor.id, reason=reason, evidence=evidence))
    audit.record(db, actor.id, "match_dispute", "match", match.id, {"reason": reason, "evidence": evidence})
    _commit(db)

    db.refresh(match)
    logger.info("match %s disputed by user %s", match.id, actor.id)
    return match


def resolve_dispute(
    db: Session,
    match_id: int,
    actor: Optional[User],
    score1: Optional[int] = None,
    score2: Optional[int] = None,
    resolution: Optional[str] = None,
    emitter: Optional[EventEmitter] = None
) -> Match:
    """
    Official override that closes a dispute by forcing a resolution.

    Scores default to the last reported ones. A match that had already been
    resolved before the dispute keeps its final scores.
    """
    actor = require_official(actor)
    match = get_match(db, match_id)

    if match.status != MatchStatus.DISPUTED.value:
        raise InvalidState("Match is not disputed")

    if score1 is None and score2 is None:
        score1, score2 = match.score1, match.score2
    if score1 is None or score2 is None:
        raise InvalidScore("Both scores are required to resolve this match")
    validate_scores(score1, score2)

    previously_resolved = match.resolved_at is not None
    if previously_resolved and (score1, score2) != (match.score1, match.score2):
        raise InvalidState("Scores of a resolved match are final")

    winner_id = decide_winner(match, score1, score2)
    now = datetime.utcnow()

    _compare_and_swap(db, match, (MatchStatus.DISPUTED,), {
        "score1": score1,
        "score2": score2,
        "winner_id": winner_id,
        "status": MatchStatus.RESOLVED.value,
        "resolved_by": actor.id,
        "resolved_at": now,
    })

    open_disputes = db.exec(
        select(Dispute).where(Dispute.match_id == match.id, Dispute.status == "open")
    ).all()
    for item in open_disputes:
        item.status = "closed"
        item.resolution = resolution
        item.resolved_by = actor.id
        item.closed_at = now
        db.add(item)

    audit.record(db, actor.id, "match_force_resolve", "match", match.id, {
        "score1": score1,
        "score2": score2,
        "winner_id": winner_id,
        "resolution": resolution,
    })
    _commit(db)

    db.refresh(match)
    logger.info("dispute on match %s closed by user %s, winner %s", match.id, actor.id, winner_id)

    # Wins were already signalled for a match resolved before the dispute
    if not previously_resolved:
        _emit_wins(db, winner_id, emitter)
    return match


def list_disputes(db: Session, match_id: int) -> List[Dispute]:
    statement = select(Dispute).where(Dispute.match_id == match_id).order_by(Dispute.id)
    return list(db.exec(statement).all())
