"""
Dependency injection for FastAPI endpoints.

Routes receive the shared array store, the webhook client and per-request
helpers through Depends(), so tests can swap any of them with
``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Cookie, Depends, HTTPException

from ..auth import AuthSession, SessionManager
from ..config import config
from ..core import MessageProcessor
from ..database.connection import redis_manager
from ..database.store import ArrayStore
from ..webhook import WebhookClient, webhook_client


def get_store() -> ArrayStore:
    """Store backed by the process-wide Redis client."""
    return redis_manager.store


def get_webhook_client() -> WebhookClient:
    return webhook_client


def get_session_manager(store: ArrayStore = Depends(get_store)) -> SessionManager:
    return SessionManager(store)


def get_message_processor(
    store: ArrayStore = Depends(get_store),
    webhook: WebhookClient = Depends(get_webhook_client),
) -> MessageProcessor:
    """Create a processor per request; it holds no state of its own."""
    return MessageProcessor(store, webhook)


def get_auth_token(
    auth_token: Optional[str] = Cookie(default=None, alias=config.auth.cookie_name),
) -> Optional[str]:
    return auth_token


async def get_current_session(
    token: Optional[str] = Depends(get_auth_token),
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthSession:
    """Resolve the session cookie or answer 401."""
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    session = await sessions.get_session(token)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid session")
    return session
