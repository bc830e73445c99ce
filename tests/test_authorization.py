from tourney.services.authorization import NO_ROLE, is_member, resolve_role


def test_captain_is_member(session, make_user, make_tournament, make_team, make_match):
    captain = make_user("captain")
    tournament = make_tournament()
    team1 = make_team(tournament, "Alpha", captain=captain)
    team2 = make_team(tournament, "Bravo")
    match = make_match(tournament, team1, team2)

    role = resolve_role(session, captain, match)
    assert role.team1 and not role.team2 and not role.official
    assert role.kind == "team1Member"
    assert role.side == 1
    assert role.can_modify


def test_roster_member_of_second_team(session, make_user, make_tournament, make_team, make_match):
    player = make_user("player")
    tournament = make_tournament()
    team1 = make_team(tournament, "Alpha")
    team2 = make_team(tournament, "Bravo", members=[player])
    match = make_match(tournament, team1, team2)

    role = resolve_role(session, player, match)
    assert role.team2 and not role.team1
    assert role.kind == "team2Member"


def test_discord_identity_counts_as_membership(session, make_user, make_tournament, make_team):
    player = make_user("player", discord_id="player#42")
    tournament = make_tournament()
    team = make_team(tournament, "Alpha", discord_id="player#42")

    assert is_member(session, team, player)


def test_outsider_has_no_role(session, make_user, make_tournament, make_team, make_match):
    outsider = make_user("outsider")
    tournament = make_tournament()
    match = make_match(tournament, make_team(tournament, "Alpha"), make_team(tournament, "Bravo"))

    role = resolve_role(session, outsider, match)
    assert role == NO_ROLE
    assert role.kind == "none"
    assert not role.can_modify


def test_anonymous_has_no_role(session, make_tournament, make_team, make_match):
    tournament = make_tournament()
    match = make_match(tournament, make_team(tournament, "Alpha"), make_team(tournament, "Bravo"))

    assert resolve_role(session, None, match) == NO_ROLE


def test_official_who_also_plays_keeps_both(session, make_user, make_tournament, make_team, make_match):
    mod = make_user("mod", role="mod")
    tournament = make_tournament()
    team1 = make_team(tournament, "Alpha", captain=mod)
    match = make_match(tournament, team1, make_team(tournament, "Bravo"))

    role = resolve_role(session, mod, match)
    assert role.official
    assert role.team1
    assert role.kind == "team1Member"


def test_bye_slot_has_no_members(session, make_user, make_tournament, make_team, make_match):
    captain = make_user("captain")
    tournament = make_tournament()
    team1 = make_team(tournament, "Alpha", captain=captain)
    match = make_match(tournament, team1, None, status="scheduled")

    role = resolve_role(session, captain, match)
    assert role.team1 and not role.team2
