from typing import Optional
from fastapi import APIRouter, Depends, Request, Response, status
from sqlmodel import Session

from ..config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..database import get_session
from ..dependencies import get_current_user, require_user
from ..errors import DuplicateUsername, InvalidInput, Unauthenticated
from ..models.user import User
from ..schemas import LoginRequest, RegisterRequest, UserResponse
from ..services.auth import (
    authenticate_user,
    create_session,
    create_user,
    delete_session,
    get_user_by_username,
)

router = APIRouter(prefix="/api/auth")


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax"
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_session)
):
    """Create an account and log it in."""
    username = payload.username.strip()
    if not username or len(payload.password) < 6:
        raise InvalidInput("Username is required and passwords need at least 6 characters")
    if get_user_by_username(db, username):
        raise DuplicateUsername()

    user = create_user(
        db,
        username=username,
        password=payload.password,
        email=payload.email
    )
    _set_session_cookie(response, create_session(db, user.id))
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_session)
):
    user = authenticate_user(db, payload.username, payload.password)
    if not user:
        raise Unauthenticated("Invalid username or password")

    _set_session_cookie(response, create_session(db, user.id))
    return user


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_session)
):
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if session_token:
        delete_session(db, session_token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(require_user)):
    return current_user


@router.get("/status")
async def auth_status(current_user: Optional[User] = Depends(get_current_user)):
    return {"authenticated": current_user is not None}
