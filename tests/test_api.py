"""HTTP routes through the ASGI app with Redis and the agent faked."""

import httpx
import pytest

from conftest import agent_reply
from sportchat.api.dependencies import get_store, get_webhook_client
from sportchat.api.main import app
from sportchat.database.models import today
from sportchat.database.repository import day_repo, goal_repo


@pytest.fixture
async def client(store, webhook):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_webhook_client] = lambda: webhook
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_register_and_duplicate_email(client):
    response = await client.post("/api/users", json={"name": "Анна", "email": "Anna@Example.com"})
    assert response.status_code == 201
    assert response.json()["email"] == "anna@example.com"

    response = await client.post("/api/users", json={"name": "Анна", "email": "anna@example.com"})
    assert response.status_code == 409
    assert response.json() == {"error": "User with this email already exists"}


@pytest.mark.asyncio
async def test_missing_fields_answer_400(client):
    response = await client.post("/api/users", json={"name": "Анна"})
    assert response.status_code == 400
    assert response.json() == {"error": "Name and email are required"}

    response = await client.get("/api/days")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_me_logout(client, user):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401

    response = await client.post("/api/auth/login", json={"email": "ANNA@example.com"})
    assert response.status_code == 200
    assert "auth_token" in response.cookies

    response = await client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["id"] == user.id

    await client.post("/api/auth/logout")
    response = await client.get("/api/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    response = await client.post("/api/auth/login", json={"email": "ghost@example.com"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_days_crud(client, user):
    response = await client.post("/api/days", json={"userId": user.id, "date": "2026-03-01"})
    assert response.status_code == 201
    day_id = response.json()["id"]

    response = await client.post("/api/days", json={"userId": user.id, "date": "2026-03-01"})
    assert response.status_code == 409

    response = await client.get("/api/days", params={"userId": user.id})
    assert [d["id"] for d in response.json()] == [day_id]

    response = await client.delete("/api/days", params={"dayId": day_id})
    assert response.json() == {"success": True}
    response = await client.delete("/api/days", params={"dayId": day_id})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_process_message(client, store, user, agent):
    await goal_repo.create(
        store,
        obj_in={"user_id": user.id, "title": "Подтянуться 100 раз", "target_value": 100, "unit": "раз"},
    )
    agent.reply_with(
        agent_reply(
            "Записал!",
            exercises=[{"name": "Подтягивания", "sets": 3, "reps": 10, "weight": None}],
        )
    )

    response = await client.post(
        "/api/process-message", json={"userId": user.id, "message": "подтянулся 3х10"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["workout_logged"] is True
    assert body["userMessage"]["message"] == "подтянулся 3х10"
    assert body["goal_updates"] == [
        "📈 Прогресс по цели «Подтянуться 100 раз»: 30/100 раз (30%). Осталось: 70 раз"
    ]
    assert len(body["botMessages"]) == 2
    assert await day_repo.get_by_date(store, user.id, today()) is not None


@pytest.mark.asyncio
async def test_process_message_webhook_failure(client, user, agent):
    agent.reply_with({"error": "down"}, status_code=503)

    response = await client.post(
        "/api/process-message", json={"userId": user.id, "message": "привет"}
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process message"
    assert "503" in body["details"]


@pytest.mark.asyncio
async def test_process_message_requires_fields(client):
    response = await client.post("/api/process-message", json={"message": "привет"})
    assert response.status_code == 400
    assert response.json() == {"error": "userId and message are required"}


@pytest.mark.asyncio
async def test_webhook_proxy_falls_back(client, agent):
    agent.reply_with({}, status_code=500)

    response = await client.post(
        "/api/webhook",
        json={"message": "привет", "user_email": "anna@example.com", "user_name": "Анна"},
    )

    assert response.status_code == 200
    body = response.json()
    assert "недоступен" in body[0]["output"]["message"]


@pytest.mark.asyncio
async def test_goal_values_are_clamped(client, user):
    response = await client.post(
        "/api/goals",
        json={"userId": user.id, "title": "Присесть 50 раз", "targetValue": 50, "currentValue": 80},
    )
    assert response.status_code == 201
    goal = response.json()
    assert goal["current_value"] == 50

    response = await client.put("/api/goals", json={"goalId": goal["id"], "currentValue": -5})
    assert response.json()["current_value"] == 0


@pytest.mark.asyncio
async def test_chat_settings_default_and_update(client, user):
    response = await client.get("/api/chat-settings", params={"userId": user.id})
    assert response.json()["settings"]["show_suggestions"] is True

    response = await client.put(
        "/api/chat-settings", json={"userId": user.id, "show_suggestions": False}
    )
    settings = response.json()["settings"]
    assert settings["show_suggestions"] is False
    assert settings["show_next_workout_recommendation"] is True


@pytest.mark.asyncio
async def test_admin_workouts_by_month(client, store, user):
    day = await day_repo.create_for_date(store, user.id, today())
    response = await client.post(
        "/api/workouts",
        json={
            "userId": user.id,
            "dayId": day.id,
            "chatMessageId": "msg-1",
            "exercises": [{"name": "Бег", "reps": 5}],
        },
    )
    assert response.status_code == 201

    response = await client.get(
        "/api/admin/workouts", params={"action": "list-by-month", "userId": user.id}
    )
    months = response.json()
    month = today().strftime("%Y-%m")
    assert list(months) == [month]
    assert months[month][0]["exercises_count"] == 1

    response = await client.delete(
        "/api/admin/workouts", params={"months": month, "userId": user.id}
    )
    assert response.json()["deleted_count"] == 1


@pytest.mark.asyncio
async def test_clear_user_data(client, store, user):
    await day_repo.create_for_date(store, user.id, today())

    response = await client.delete("/api/clear-user-data", params={"userId": user.id})

    assert response.status_code == 200
    assert response.json()["deleted"]["days"] == 1
    assert await day_repo.get_by_user(store, user.id) == []


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client):
    response = await client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_health_reports_redis(client, monkeypatch):
    from sportchat.database.connection import redis_manager

    async def down():
        return False

    monkeypatch.setattr(redis_manager, "health_check", down)
    response = await client.get("/health")
    assert response.json() == {"status": "unhealthy", "redis": "disconnected"}
