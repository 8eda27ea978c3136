"""
Day and chat history endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...database.models import ChatMessage, Day
from ...database.repository import chat_message_repo, day_repo
from ...database.store import ArrayStore
from ..dependencies import get_store
from ..schemas import ChatMessageCreate, DayCreate

router = APIRouter(tags=["days"])


@router.get("/days", response_model=List[Day])
async def list_days(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    """A user's days, newest first."""
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return await day_repo.get_by_user(store, user_id)


@router.post("/days", response_model=Day, status_code=201)
async def create_day(body: DayCreate, store: ArrayStore = Depends(get_store)):
    if not body.user_id or not body.date:
        raise HTTPException(status_code=400, detail="userId and date are required")
    return await day_repo.create_for_date(store, body.user_id, body.date)


@router.delete("/days")
async def delete_day(
    day_id: Optional[str] = Query(None, alias="dayId"),
    store: ArrayStore = Depends(get_store),
):
    """Delete a day with its workouts and messages. Goals are kept."""
    if not day_id:
        raise HTTPException(status_code=400, detail="dayId is required")
    await day_repo.delete_with_contents(store, day_id)
    return {"success": True}


@router.get("/chat", response_model=List[ChatMessage])
async def list_messages(
    day_id: Optional[str] = Query(None, alias="dayId"),
    store: ArrayStore = Depends(get_store),
):
    if not day_id:
        raise HTTPException(status_code=400, detail="dayId is required")
    return await chat_message_repo.get_by_day(store, day_id)


@router.post("/chat", response_model=ChatMessage, status_code=201)
async def create_message(body: ChatMessageCreate, store: ArrayStore = Depends(get_store)):
    if not body.user_id or not body.day_id or not body.message or body.is_user is None:
        raise HTTPException(
            status_code=400, detail="userId, dayId, message, and isUser are required"
        )
    return await chat_message_repo.add(
        store, body.user_id, body.day_id, body.message, is_user=body.is_user
    )
