"""
First-round bracket generation.

Eligible teams are shuffled uniformly and paired into `bracket_size / 2`
slots: slot i gets shuffled[2i] vs shuffled[2i + 1]. Slots past the end of
the pool get a None opponent (a bye). Generation is one-shot; once round-1
matches exist any further call is rejected rather than re-shuffling.
"""
import logging
import random
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import BracketAlreadyGenerated, InsufficientTeams, InvalidInput, NotFound
from ..models.match import Match, MatchStatus
from ..models.team import Team
from ..models.tournament import Tournament, TournamentStatus
from ..models.user import User
from . import audit
from .authorization import require_official
from .registry import list_eligible_teams

logger = logging.getLogger(__name__)

FIRST_ROUND = 1

Pairing = Tuple[Optional[Team], Optional[Team]]


def pair_teams(teams: Sequence[Team], bracket_size: int, rng: random.Random) -> List[Pairing]:
    """Shuffle a copy of `teams` and cut it into first-round slots."""
    shuffled = list(teams)
    rng.shuffle(shuffled)

    pairings: List[Pairing] = []
    for i in range(bracket_size // 2):
        team1 = shuffled[2 * i] if 2 * i < len(shuffled) else None
        team2 = shuffled[2 * i + 1] if 2 * i + 1 < len(shuffled) else None
        pairings.append((team1, team2))
    return pairings


def has_first_round(db: Session, tournament_id: int) -> bool:
    existing = db.exec(
        select(Match.id).where(
            Match.tournament_id == tournament_id,
            Match.round == FIRST_ROUND
        )
    ).first()
    return existing is not None


def generate_bracket(
    db: Session,
    tournament_id: int,
    actor: Optional[User],
    rng: Optional[random.Random] = None
) -> List[Match]:
    actor = require_official(actor)

    tournament = db.exec(
        select(Tournament).where(Tournament.id == tournament_id).with_for_update()
    ).first()
    if not tournament:
        raise NotFound("Tournament not found")

    if has_first_round(db, tournament_id):
        raise BracketAlreadyGenerated()

    eligible = list_eligible_teams(db, tournament_id)
    if len(eligible) < 2:
        raise InsufficientTeams()
    if len(eligible) > tournament.bracket_size:
        raise InvalidInput(
            f"{len(eligible)} teams are checked in but the bracket only seats {tournament.bracket_size}"
        )

    pairings = pair_teams(eligible, tournament.bracket_size, rng or random.SystemRandom())

    matches = []
    for position, (team1, team2) in enumerate(pairings):
        match = Match(
            tournament_id=tournament_id,
            round=FIRST_ROUND,
            bracket_pos=position,
            team1_id=team1.id if team1 else None,
            team2_id=team2.id if team2 else None,
            status=MatchStatus.SCHEDULED.value
        )
        db.add(match)
        matches.append(match)

    if tournament.status == TournamentStatus.UPCOMING.value:
        tournament.status = TournamentStatus.ACTIVE.value
        db.add(tournament)

    audit.record(
        db,
        actor.id,
        "bracket_generate",
        "tournament",
        tournament_id,
        {
            "teams": len(eligible),
            "pairings": [
                [team1.id if team1 else None, team2.id if team2 else None]
                for team1, team2 in pairings
            ],
        }
    )

    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent request filled the same bracket slots first
        db.rollback()
        raise BracketAlreadyGenerated() from exc

    for match in matches:
        db.refresh(match)

    logger.info(
        "bracket generated for tournament %s: %s teams, %s matches",
        tournament_id, len(eligible), len(matches)
    )
    return matches
