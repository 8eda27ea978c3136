"""Token sessions stored in the key-value store with a TTL."""

import logging
import secrets
import time
from typing import Optional

from pydantic import BaseModel, ValidationError

from .config import config
from .database.repository import RecordNotFoundError, user_repo
from .database.store import ArrayStore

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class AuthSession(BaseModel):
    """What a session token resolves to."""

    user_id: str
    email: str
    name: str
    expires_at: float  # unix seconds


def _session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


class SessionManager:
    """Creates, resolves and revokes login sessions."""

    def __init__(self, store: ArrayStore, *, ttl_seconds: int | None = None) -> None:
        self._store = store
        self._ttl = ttl_seconds or config.auth.session_ttl_days * 24 * 60 * 60

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    @staticmethod
    def generate_token() -> str:
        return secrets.token_urlsafe(32)

    async def create_session(self, user_id: str) -> str:
        """Open a session for an existing user and return its token."""
        user = await user_repo.get(self._store, user_id)
        if user is None:
            raise RecordNotFoundError("User not found")

        token = self.generate_token()
        session = AuthSession(
            user_id=user.id,
            email=user.email,
            name=user.name,
            expires_at=time.time() + self._ttl,
        )
        await self._store.set_json(
            _session_key(token), session.model_dump(), ttl_seconds=self._ttl
        )
        return token

    async def get_session(self, token: str) -> Optional[AuthSession]:
        """Resolve a token. Missing, malformed and expired sessions give None.

        Redis expires keys on its own; an entry that is past ``expires_at``
        but still present is removed here.
        """
        if not token:
            return None
        data = await self._store.get_json(_session_key(token))
        if data is None:
            return None

        try:
            session = AuthSession.model_validate(data)
        except ValidationError:
            logger.warning("Dropping malformed session entry")
            await self._store.delete(_session_key(token))
            return None

        if time.time() > session.expires_at:
            await self._store.delete(_session_key(token))
            return None
        return session

    async def delete_session(self, token: str) -> None:
        await self._store.delete(_session_key(token))

    async def revoke_user_sessions(self, user_id: str) -> int:
        """Delete every session that belongs to ``user_id``."""
        doomed = []
        for key in await self._store.scan_keys(f"{SESSION_KEY_PREFIX}*"):
            data = await self._store.get_json(key)
            if isinstance(data, dict) and data.get("user_id") == user_id:
                doomed.append(key)
        return await self._store.delete(*doomed)
