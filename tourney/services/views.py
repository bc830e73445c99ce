from typing import List, Optional
from sqlmodel import Session

from ..models.match import Match
from ..models.team import Team
from ..models.user import User
from ..schemas import MatchView, TeamMemberResponse, TeamSummary
from .authorization import resolve_role
from .registry import list_team_members


def roster(db: Session, team: Optional[Team]) -> List[TeamMemberResponse]:
    """Roster rows plus the captain when the captain has no explicit row."""
    if team is None:
        return []

    members = []
    seen = set()
    for member in list_team_members(db, team.id):
        user = db.get(User, member.user_id)
        members.append(TeamMemberResponse(
            user_id=member.user_id,
            username=user.username if user else None,
            role=member.role
        ))
        seen.add(member.user_id)

    if team.captain_user_id is not None and team.captain_user_id not in seen:
        captain = db.get(User, team.captain_user_id)
        members.insert(0, TeamMemberResponse(
            user_id=team.captain_user_id,
            username=captain.username if captain else None,
            role="captain"
        ))
    return members


def build_match_view(db: Session, match: Match, user: Optional[User]) -> MatchView:
    team1 = db.get(Team, match.team1_id) if match.team1_id else None
    team2 = db.get(Team, match.team2_id) if match.team2_id else None
    role = resolve_role(db, user, match)

    user_team_id = None
    if role.team1:
        user_team_id = match.team1_id
    if role.team2:
        user_team_id = match.team2_id

    return MatchView(
        id=match.id,
        tournament_id=match.tournament_id,
        round=match.round,
        bracket_pos=match.bracket_pos,
        team1_id=match.team1_id,
        team2_id=match.team2_id,
        score1=match.score1,
        score2=match.score2,
        winner_id=match.winner_id,
        status=match.status,
        reported_by=match.reported_by,
        reported_at=match.reported_at,
        resolved_by=match.resolved_by,
        resolved_at=match.resolved_at,
        team1=TeamSummary(id=team1.id, name=team1.name) if team1 else None,
        team2=TeamSummary(id=team2.id, name=team2.name) if team2 else None,
        team1_members=roster(db, team1),
        team2_members=roster(db, team2),
        can_modify=role.can_modify,
        is_participant=role.is_participant,
        user_team_id=user_team_id
    )
