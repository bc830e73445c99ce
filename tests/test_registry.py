import pytest
from sqlmodel import select

from tourney.errors import (
    CheckInClosed,
    DuplicateTeamName,
    Forbidden,
    InvalidInput,
    NotApproved,
    NotFound,
    RegistrationClosed,
    TournamentFull,
    TournamentMismatch,
)
from tourney.models import AuditLogEntry, TeamMember, TeamStatus
from tourney.services import registry
from tourney.services.events import CHECKIN


def test_list_eligible_teams_requires_approval_and_check_in(session, make_tournament, make_team):
    tournament = make_tournament()
    make_team(tournament, "Ready")
    make_team(tournament, "Pending", status="pending", checked_in=True)
    make_team(tournament, "Not Here", checked_in=False)
    make_team(tournament, "Rejected", status="rejected")

    other = make_tournament(name="Other Cup")
    make_team(other, "Elsewhere")

    eligible = registry.list_eligible_teams(session, tournament.id)
    assert [team.name for team in eligible] == ["Ready"]


def test_check_in_flips_flag_and_signals_captain(session, make_user, make_tournament, make_team, emitter):
    captain = make_user("captain")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", captain=captain, checked_in=False)

    result = registry.check_in(session, tournament.id, team.check_in_code.lower(), emitter=emitter)

    assert result.id == team.id
    assert result.is_checked_in is True
    assert emitter.received == [(CHECKIN, captain.id)]
    assert len(session.exec(select(AuditLogEntry).where(AuditLogEntry.action == "team_checkin")).all()) == 1


def test_check_in_twice_is_idempotent(session, make_user, make_tournament, make_team, emitter):
    captain = make_user("captain")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", captain=captain, checked_in=False)

    registry.check_in(session, tournament.id, team.check_in_code, emitter=emitter)
    registry.check_in(session, tournament.id, team.check_in_code, emitter=emitter)

    assert len(emitter.received) == 1


def test_check_in_unknown_code(session, make_tournament):
    tournament = make_tournament()
    with pytest.raises(NotFound):
        registry.check_in(session, tournament.id, "ZZZZZZ")


def test_check_in_empty_code(session, make_tournament):
    tournament = make_tournament()
    with pytest.raises(InvalidInput):
        registry.check_in(session, tournament.id, "   ")


def test_check_in_code_from_other_tournament(session, make_tournament, make_team):
    first = make_tournament()
    second = make_tournament(name="Second Cup")
    team = make_team(first, "Alpha", checked_in=False)

    with pytest.raises(TournamentMismatch):
        registry.check_in(session, second.id, team.check_in_code)


@pytest.mark.parametrize("status", ["approved", "pending", "rejected"])
def test_check_in_closed_regardless_of_approval(session, make_tournament, make_team, status):
    tournament = make_tournament(check_in_open=False)
    team = make_team(tournament, "Alpha", status=status, checked_in=False)

    with pytest.raises(CheckInClosed):
        registry.check_in(session, tournament.id, team.check_in_code)

    session.refresh(team)
    assert team.is_checked_in is False


def test_check_in_requires_approval(session, make_tournament, make_team):
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", status="pending", checked_in=False)

    with pytest.raises(NotApproved):
        registry.check_in(session, tournament.id, team.check_in_code)


def test_check_in_signal_failure_does_not_undo_check_in(session, make_user, make_tournament, make_team, emitter):
    captain = make_user("captain")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", captain=captain, checked_in=False)

    def broken(event, user_id):
        raise RuntimeError("mission service down")

    emitter.subscribe(broken)
    registry.check_in(session, tournament.id, team.check_in_code, emitter=emitter)

    session.refresh(team)
    assert team.is_checked_in is True


def test_register_team_creates_captain_membership(session, make_user, make_tournament):
    captain = make_user("captain", discord_id="captain#1")
    tournament = make_tournament()

    team = registry.register_team(session, tournament.id, "  Alpha ", "Cap", captain=captain)

    assert team.name == "Alpha"
    assert team.status == TeamStatus.PENDING.value
    assert team.is_checked_in is False
    assert team.discord_id == "captain#1"
    assert len(team.check_in_code) == 6
    assert team.check_in_code == team.check_in_code.upper()

    members = session.exec(select(TeamMember).where(TeamMember.team_id == team.id)).all()
    assert [(m.user_id, m.role) for m in members] == [(captain.id, "captain")]


def test_register_team_rejects_duplicate_name(session, make_tournament):
    tournament = make_tournament()
    registry.register_team(session, tournament.id, "Alpha", "Cap")

    with pytest.raises(DuplicateTeamName):
        registry.register_team(session, tournament.id, "ALPHA", "Someone")


def test_register_team_when_closed(session, make_tournament):
    tournament = make_tournament(registration_open=False)
    with pytest.raises(RegistrationClosed):
        registry.register_team(session, tournament.id, "Alpha", "Cap")


def test_register_team_when_full(session, make_tournament, make_team):
    tournament = make_tournament(max_teams=2)
    make_team(tournament, "Alpha")
    make_team(tournament, "Bravo")
    make_team(tournament, "Rejected", status="rejected")

    with pytest.raises(TournamentFull):
        registry.register_team(session, tournament.id, "Charlie", "Cap")


def test_register_team_requires_names(session, make_tournament):
    tournament = make_tournament()
    with pytest.raises(InvalidInput):
        registry.register_team(session, tournament.id, "", "Cap")


def test_check_in_codes_are_unique(session, make_tournament):
    tournament = make_tournament(max_teams=64)
    codes = {
        registry.register_team(session, tournament.id, f"Team {i}", "Cap").check_in_code
        for i in range(40)
    }
    assert len(codes) == 40


def test_set_team_status_requires_official(session, make_user, make_tournament, make_team):
    player = make_user("player")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", status="pending")

    with pytest.raises(Forbidden):
        registry.set_team_status(session, team.id, TeamStatus.APPROVED, player)


def test_set_team_status_is_audited(session, moderator, make_tournament, make_team):
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", status="pending")

    registry.set_team_status(session, team.id, TeamStatus.APPROVED, moderator)

    entry = session.exec(select(AuditLogEntry).where(AuditLogEntry.action == "team_approve")).one()
    assert entry.actor_user_id == moderator.id
    assert entry.entity_id == team.id


def test_add_team_member(session, admin, make_user, make_tournament, make_team):
    tournament = make_tournament()
    team = make_team(tournament, "Alpha")
    player = make_user("player")

    registry.add_team_member(session, team.id, player.id, admin)

    assert [m.user_id for m in registry.list_team_members(session, team.id)] == [player.id]
    with pytest.raises(InvalidInput):
        registry.add_team_member(session, team.id, player.id, admin)


def test_team_user_ids_puts_captain_first_without_duplicates(session, make_user, make_tournament, make_team):
    captain = make_user("captain")
    player = make_user("player")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", captain=captain, members=[player, captain])

    assert registry.team_user_ids(session, team) == [captain.id, player.id]
