from typing import Optional
from fastapi import Request, Depends
from sqlmodel import Session

from .config import SESSION_COOKIE_NAME
from .database import get_session
from .models.user import User
from .services import authorization
from .services.auth import get_user_by_session_token
from .services.events import get_event_emitter  # noqa: F401


async def get_current_user(
    request: Request,
    db: Session = Depends(get_session)
) -> Optional[User]:
    """Get the current logged-in user from the session cookie."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_token:
        return None
    return get_user_by_session_token(db, session_token)


async def require_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Require a logged-in user."""
    return authorization.require_user(current_user)


async def require_official(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Require an admin or moderator."""
    return authorization.require_official(current_user)


async def require_admin(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Require an admin user."""
    return authorization.require_admin(current_user)
