import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from main import app  # noqa: E402
from tourney.config import SESSION_COOKIE_NAME  # noqa: E402
from tourney.database import get_session  # noqa: E402
from tourney.limiter import limiter  # noqa: E402
from tourney.models import Match, Team, TeamMember, Tournament, User  # noqa: E402
from tourney.services.auth import create_session, hash_password  # noqa: E402
from tourney.services.events import EventEmitter, get_signal_bus  # noqa: E402
from tourney.services.registry import generate_check_in_code  # noqa: E402

# Create in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

limiter.enabled = False


class RecordingEmitter(EventEmitter):
    """Emitter that remembers every signal it delivered."""

    def __init__(self):
        super().__init__()
        self.received = []
        self.subscribe(lambda event, user_id: self.received.append((event, user_id)))


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="emitter")
def emitter_fixture():
    return RecordingEmitter()


@pytest.fixture(name="client")
def client_fixture(session: Session, emitter: RecordingEmitter):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_signal_bus] = lambda: emitter
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    def make_user(username, role="user", discord_id=None):
        user = User(
            username=username,
            password_hash=hash_password("password123"),
            role=role,
            discord_id=discord_id
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return make_user


@pytest.fixture(name="admin")
def admin_fixture(make_user):
    return make_user("admin", role="admin")


@pytest.fixture(name="moderator")
def moderator_fixture(make_user):
    return make_user("moderator", role="moderator")


@pytest.fixture(name="make_tournament")
def make_tournament_fixture(session: Session):
    def make_tournament(name="Weekly Cup", bracket_size=4, max_teams=16, check_in_open=True, registration_open=True):
        tournament = Tournament(
            name=name,
            starts_at=datetime(2026, 11, 1, 18, 0),
            bracket_size=bracket_size,
            max_teams=max_teams,
            check_in_open=check_in_open,
            registration_open=registration_open
        )
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
        return tournament
    return make_tournament


@pytest.fixture(name="make_team")
def make_team_fixture(session: Session):
    def make_team(tournament, name, captain=None, status="approved", checked_in=True, members=(), discord_id=None):
        team = Team(
            tournament_id=tournament.id,
            name=name,
            captain_user_id=captain.id if captain else None,
            captain_name=captain.username if captain else name,
            discord_id=discord_id,
            check_in_code=generate_check_in_code(session),
            status=status,
            is_checked_in=checked_in
        )
        session.add(team)
        session.commit()
        session.refresh(team)
        for member in members:
            session.add(TeamMember(team_id=team.id, user_id=member.id))
        session.commit()
        return team
    return make_team


@pytest.fixture(name="make_match")
def make_match_fixture(session: Session):
    def make_match(tournament, team1, team2, status="live", bracket_pos=0):
        match = Match(
            tournament_id=tournament.id,
            round=1,
            bracket_pos=bracket_pos,
            team1_id=team1.id if team1 else None,
            team2_id=team2.id if team2 else None,
            status=status
        )
        session.add(match)
        session.commit()
        session.refresh(match)
        return match
    return make_match


@pytest.fixture(name="login")
def login_fixture(session: Session, client: TestClient):
    """Attach a fresh session cookie for `user` to the test client."""
    def login(user):
        token = create_session(session, user.id)
        client.cookies.set(SESSION_COOKIE_NAME, token)
        return token
    return login
