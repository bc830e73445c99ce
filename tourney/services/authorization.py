"""
Authorization resolver.

Decides, for a user and a match, which sides of the match the user may act
for. Team membership and official status are evaluated independently: an
official who also plays on a team keeps both capabilities.
"""
from dataclasses import dataclass
from typing import Optional
from sqlmodel import Session, select

from ..config import OFFICIAL_ROLES
from ..errors import Forbidden, Unauthenticated
from ..models.match import Match
from ..models.team import Team, TeamMember
from ..models.user import User


@dataclass(frozen=True)
class MatchRole:
    team1: bool = False
    team2: bool = False
    official: bool = False

    @property
    def is_participant(self) -> bool:
        return self.team1 or self.team2

    @property
    def can_modify(self) -> bool:
        return self.is_participant or self.official

    @property
    def side(self) -> Optional[int]:
        if self.team1:
            return 1
        if self.team2:
            return 2
        return None

    @property
    def kind(self) -> str:
        if self.team1:
            return "team1Member"
        if self.team2:
            return "team2Member"
        if self.official:
            return "official"
        return "none"


NO_ROLE = MatchRole()


def is_official(user: Optional[User]) -> bool:
    return user is not None and user.role in OFFICIAL_ROLES


def is_member(db: Session, team: Optional[Team], user: Optional[User]) -> bool:
    """Membership over both storage shapes: roster rows and the team record itself."""
    if team is None or user is None or user.id is None:
        return False
    if team.captain_user_id == user.id:
        return True
    if team.discord_id and user.discord_id and team.discord_id == user.discord_id:
        return True
    membership = db.exec(
        select(TeamMember).where(
            TeamMember.team_id == team.id,
            TeamMember.user_id == user.id
        )
    ).first()
    return membership is not None


def resolve_role(db: Session, user: Optional[User], match: Match) -> MatchRole:
    if user is None:
        return NO_ROLE
    team1 = db.get(Team, match.team1_id) if match.team1_id else None
    team2 = db.get(Team, match.team2_id) if match.team2_id else None
    return MatchRole(
        team1=is_member(db, team1, user),
        team2=is_member(db, team2, user),
        official=is_official(user)
    )


def side_of(db: Session, user_id: Optional[int], match: Match) -> MatchRole:
    """Resolve the sides of a stored user id, e.g. the match reporter."""
    if user_id is None:
        return NO_ROLE
    return resolve_role(db, db.get(User, user_id), match)


def require_user(user: Optional[User]) -> User:
    if user is None:
        raise Unauthenticated()
    return user


def require_official(user: Optional[User]) -> User:
    user = require_user(user)
    if not is_official(user):
        raise Forbidden("Admin or moderator access required")
    return user


def require_admin(user: Optional[User]) -> User:
    user = require_user(user)
    if user.role != "admin":
        raise Forbidden("Admin access required")
    return user
