from .user import User
from .session import Session
from .tournament import Tournament, TournamentStatus
from .team import Team, TeamMember, TeamStatus
from .match import Match, MatchStatus
from .dispute import Dispute
from .audit_log import AuditLogEntry

__all__ = [
    "User",
    "Session",
    "Tournament",
    "TournamentStatus",
    "Team",
    "TeamMember",
    "TeamStatus",
    "Match",
    "MatchStatus",
    "Dispute",
    "AuditLogEntry",
]
