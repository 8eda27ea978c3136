"""Shared fixtures: an in-memory Redis and a scripted agent webhook."""

import httpx
import pytest
from fakeredis import FakeAsyncRedis, FakeServer

from sportchat.database.repository import user_repo
from sportchat.database.store import ArrayStore
from sportchat.webhook import WebhookClient

WEBHOOK_URL = "http://agent.test/webhook"


@pytest.fixture
async def redis_client():
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return ArrayStore(redis_client)


@pytest.fixture
async def user(store):
    return await user_repo.register(store, "Анна", "anna@example.com")


def agent_reply(message="Отлично!", exercises=None, suggestions=None, next_workout=""):
    """Body the agent sends back for a chat message."""
    return [
        {
            "output": {
                "message": message,
                "workout_logged": bool(exercises),
                "parsed_exercises": exercises or [],
                "suggestions": suggestions or [],
                "next_workout_recommendation": next_workout,
            }
        }
    ]


class ScriptedAgent:
    """Answers webhook calls from a queue and records what it received."""

    def __init__(self) -> None:
        self.replies: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []

    def reply_with(self, body, status_code: int = 200) -> None:
        self.replies.append(httpx.Response(status_code, json=body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            return httpx.Response(503, text="no reply queued")
        return self.replies.pop(0)


@pytest.fixture
def agent():
    return ScriptedAgent()


@pytest.fixture
async def webhook(agent):
    client = WebhookClient(WEBHOOK_URL, transport=httpx.MockTransport(agent.handler))
    await client.initialize()
    yield client
    await client.close()
