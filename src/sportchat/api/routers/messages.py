"""
Chat pipeline, agent webhook proxy and per-user data cleanup.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from redis.exceptions import RedisError

from ...auth import SessionManager
from ...core import MessageProcessor
from ...database.repository import purge_user_data
from ...database.store import ArrayStore
from ...webhook import WebhookClient, WebhookError, fallback_reply
from ..dependencies import (
    get_message_processor,
    get_session_manager,
    get_store,
    get_webhook_client,
)
from ..errors import error_response
from ..schemas import ProcessMessageRequest, WebhookProxyRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


@router.post("/process-message")
async def process_message(
    body: ProcessMessageRequest,
    processor: MessageProcessor = Depends(get_message_processor),
):
    """Run one chat message through the agent and apply the result.

    Agent and storage failures answer 500 with the failure in ``details``.
    The user's own message stays stored in that case.
    """
    if not body.user_id or not body.message:
        raise HTTPException(status_code=400, detail="userId and message are required")

    try:
        result = await processor.process(body.user_id, body.message, body.day_id)
    except (WebhookError, RedisError) as e:
        logger.error("Message processing failed for %s: %s", body.user_id, e)
        return error_response(500, "Failed to process message", str(e))

    return {
        "success": True,
        "userMessage": result.user_message,
        "botMessages": result.bot_messages,
        "workout_logged": result.workout_logged,
        "parsed_exercises": result.parsed_exercises,
        "message": result.message,
        "workout": result.workout,
        "goal_updates": result.goal_updates,
    }


@router.post("/webhook")
async def proxy_webhook(
    body: WebhookProxyRequest,
    webhook: WebhookClient = Depends(get_webhook_client),
):
    """Forward a message to the agent. An unreachable agent gets an apology."""
    if not body.message or not body.user_email or not body.user_name:
        raise HTTPException(
            status_code=400, detail="message, user_email, and user_name are required"
        )

    try:
        payload = await webhook.send(body.message, body.user_email, body.user_name)
    except WebhookError as e:
        logger.warning("Webhook unavailable, answering with fallback: %s", e)
        payload = fallback_reply()
    return [payload.model_dump(exclude={"kind"})]


@router.delete("/clear-user-data")
async def clear_user_data(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Erase everything a user produced but keep the account itself."""
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")

    deleted = await purge_user_data(store, user_id)
    deleted["sessions"] = await sessions.revoke_user_sessions(user_id)
    return {"success": True, "deleted": deleted}
