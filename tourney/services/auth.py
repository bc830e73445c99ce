import secrets
from datetime import datetime, timedelta
from typing import Optional
import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models.user import User
from ..models.session import Session as UserSession
from ..config import SESSION_EXPIRE_DAYS
from ..errors import DuplicateDiscordId, NotFound
from . import audit
from .authorization import require_official


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed.encode("utf-8"))


def create_session(db: Session, user_id: int) -> str:
    """Create a new session for a user and return the session token."""
    session_token = secrets.token_urlsafe(32)
    expires_at = datetime.utcnow() + timedelta(days=SESSION_EXPIRE_DAYS)

    user_session = UserSession(
        user_id=user_id,
        session_token=session_token,
        expires_at=expires_at
    )
    db.add(user_session)
    db.commit()

    return session_token


def get_user_by_session_token(db: Session, session_token: str) -> Optional[User]:
    """Get user by session token if the session is still valid."""
    statement = select(UserSession).where(
        UserSession.session_token == session_token,
        UserSession.expires_at > datetime.utcnow()
    )
    user_session = db.exec(statement).first()
    if not user_session:
        return None

    return db.get(User, user_session.user_id)


def delete_session(db: Session, session_token: str) -> None:
    """Delete a session (logout)."""
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()
    if user_session:
        db.delete(user_session)
        db.commit()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    statement = select(User).where(User.username == username)
    return db.exec(statement).first()


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """Authenticate a user by username and password."""
    user = get_user_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    email: Optional[str] = None,
    discord_id: Optional[str] = None,
    role: str = "user"
) -> User:
    """Create a new user."""
    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        discord_id=discord_id,
        role=role
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def link_discord_id(db: Session, user_id: int, discord_id: Optional[str], actor: Optional[User]) -> User:
    """
    Attach a verified Discord identity to an account, or clear it with None.

    Team membership honours this id, so only officials may set it.
    """
    actor = require_official(actor)
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    discord_id = (discord_id or "").strip() or None
    if discord_id:
        holder = db.exec(select(User).where(User.discord_id == discord_id)).first()
        if holder and holder.id != user.id:
            raise DuplicateDiscordId()

    previous = user.discord_id
    user.discord_id = discord_id
    db.add(user)
    audit.record(db, actor.id, "user_link_discord", "user", user.id, {"from": previous, "to": discord_id})
    try:
        db.commit()
    except IntegrityError as exc:
        # Linked to someone else between the check and the commit
        db.rollback()
        raise DuplicateDiscordId() from exc

    db.refresh(user)
    return user
