"""
User registration and cookie-session authentication endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ...auth import AuthSession, SessionManager
from ...config import config
from ...database.models import User
from ...database.repository import RecordNotFoundError, user_repo
from ...database.store import ArrayStore
from ..dependencies import (
    get_auth_token,
    get_current_session,
    get_session_manager,
    get_store,
)
from ..schemas import LoginRequest, UserCreate, UserResponse

router = APIRouter(tags=["users"])


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id, name=user.name, email=user.email, created_at=user.created_at
    )


@router.get("/users", response_model=List[User])
async def list_users(store: ArrayStore = Depends(get_store)):
    return await user_repo.get_all(store)


@router.post("/users", response_model=User, status_code=201)
async def create_user(body: UserCreate, store: ArrayStore = Depends(get_store)):
    """Register a user. Emails are unique regardless of case."""
    if not body.name or not body.email:
        raise HTTPException(status_code=400, detail="Name and email are required")
    return await user_repo.register(store, body.name, body.email)


@router.post("/auth/login")
async def login(
    body: LoginRequest,
    response: Response,
    store: ArrayStore = Depends(get_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Log in by email and set the session cookie."""
    if not body.email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = await user_repo.get_by_email(store, body.email)
    if user is None:
        raise RecordNotFoundError("User not found")

    token = await sessions.create_session(user.id)
    response.set_cookie(
        config.auth.cookie_name,
        token,
        max_age=sessions.ttl_seconds,
        httponly=True,
        secure=config.environment == "production",
        samesite="strict",
    )
    return {"success": True, "user": _to_response(user)}


@router.post("/auth/logout")
async def logout(
    response: Response,
    token: str | None = Depends(get_auth_token),
    sessions: SessionManager = Depends(get_session_manager),
):
    if token:
        await sessions.delete_session(token)
    response.delete_cookie(
        config.auth.cookie_name,
        httponly=True,
        secure=config.environment == "production",
        samesite="strict",
    )
    return {"success": True}


@router.get("/auth/me", response_model=UserResponse)
async def me(
    session: AuthSession = Depends(get_current_session),
    store: ArrayStore = Depends(get_store),
):
    """Current user, read fresh from storage rather than from the session."""
    user = await user_repo.get(store, session.user_id)
    if user is None:
        raise RecordNotFoundError("User not found")
    return _to_response(user)


@router.put("/auth/update-profile", response_model=UserResponse)
async def update_profile(
    body: UserCreate,
    session: AuthSession = Depends(get_current_session),
    store: ArrayStore = Depends(get_store),
):
    if not body.name or not body.email:
        raise HTTPException(status_code=400, detail="Name and email are required")
    user = await user_repo.update_profile(store, session.user_id, body.name, body.email)
    return _to_response(user)
