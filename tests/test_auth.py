"""Session tokens stored with a TTL."""

import time

import pytest

from sportchat.auth import SESSION_KEY_PREFIX, SessionManager
from sportchat.database.repository import RecordNotFoundError


@pytest.fixture
def sessions(store):
    return SessionManager(store)


@pytest.mark.asyncio
async def test_session_resolves_to_user(sessions, user):
    token = await sessions.create_session(user.id)

    session = await sessions.get_session(token)

    assert session.user_id == user.id
    assert session.email == "anna@example.com"
    assert session.expires_at > time.time()


@pytest.mark.asyncio
async def test_session_key_has_ttl(sessions, user, redis_client):
    token = await sessions.create_session(user.id)
    ttl = await redis_client.ttl(f"{SESSION_KEY_PREFIX}{token}")
    assert 0 < ttl <= 7 * 24 * 60 * 60


@pytest.mark.asyncio
async def test_tokens_are_unique(sessions, user):
    assert await sessions.create_session(user.id) != await sessions.create_session(user.id)


@pytest.mark.asyncio
async def test_unknown_user_cannot_log_in(sessions):
    with pytest.raises(RecordNotFoundError):
        await sessions.create_session("user-missing")


@pytest.mark.asyncio
async def test_unknown_and_empty_tokens(sessions):
    assert await sessions.get_session("nope") is None
    assert await sessions.get_session("") is None


@pytest.mark.asyncio
async def test_expired_session_is_removed(sessions, user, store, redis_client):
    token = await sessions.create_session(user.id)
    key = f"{SESSION_KEY_PREFIX}{token}"
    data = await store.get_json(key)
    data["expires_at"] = time.time() - 1
    await store.set_json(key, data)

    assert await sessions.get_session(token) is None
    assert await redis_client.exists(key) == 0


@pytest.mark.asyncio
async def test_malformed_session_is_removed(sessions, redis_client):
    await redis_client.set(f"{SESSION_KEY_PREFIX}bad", '{"user_id": 1}')
    assert await sessions.get_session("bad") is None
    assert await redis_client.exists(f"{SESSION_KEY_PREFIX}bad") == 0


@pytest.mark.asyncio
async def test_logout_and_revoke(sessions, user):
    first = await sessions.create_session(user.id)
    second = await sessions.create_session(user.id)

    await sessions.delete_session(first)
    assert await sessions.get_session(first) is None
    assert await sessions.get_session(second) is not None

    assert await sessions.revoke_user_sessions(user.id) == 1
    assert await sessions.get_session(second) is None
