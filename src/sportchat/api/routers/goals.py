"""
Goals and achievements API endpoints.

Progress normally advances through the chat pipeline; these endpoints are
the manual CRUD used by the dashboard.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...database.models import Achievement, Goal, today
from ...database.repository import RecordNotFoundError, achievement_repo, goal_repo
from ...database.store import ArrayStore
from ..dependencies import get_store
from ..schemas import AchievementCreate, GoalCreate, GoalUpdate

router = APIRouter(tags=["goals"])


def _clamp(value: float, target: float) -> float:
    return max(0.0, min(value, target))


@router.get("/goals", response_model=List[Goal])
async def list_goals(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return await goal_repo.get_by_user(store, user_id)


@router.post("/goals", response_model=Goal, status_code=201)
async def create_goal(body: GoalCreate, store: ArrayStore = Depends(get_store)):
    """Create a goal. The starting value is clamped into ``[0, targetValue]``."""
    if not body.user_id or not body.title or not body.target_value:
        raise HTTPException(
            status_code=400, detail="userId, title, and targetValue are required"
        )
    return await goal_repo.create(
        store,
        obj_in={
            "user_id": body.user_id,
            "title": body.title,
            "description": body.description,
            "target_value": body.target_value,
            "current_value": _clamp(body.current_value, body.target_value),
            "unit": body.unit,
            "category": body.category,
            "due_date": body.due_date,
        },
    )


@router.put("/goals", response_model=Goal)
async def update_goal(body: GoalUpdate, store: ArrayStore = Depends(get_store)):
    if not body.goal_id:
        raise HTTPException(status_code=400, detail="goalId is required")

    goal = await goal_repo.get(store, body.goal_id)
    if goal is None:
        raise RecordNotFoundError("Goal not found")

    updates = {
        k: v
        for k, v in body.model_dump(exclude_unset=True, exclude={"goal_id"}).items()
        if v is not None
    }
    target = updates.get("target_value") or goal.target_value
    current = updates.get("current_value", goal.current_value)
    updates["current_value"] = _clamp(current, target)

    return await goal_repo.update(store, goal.id, obj_in=updates)


@router.delete("/goals")
async def delete_goal(
    goal_id: Optional[str] = Query(None, alias="goalId"),
    store: ArrayStore = Depends(get_store),
):
    if not goal_id:
        raise HTTPException(status_code=400, detail="goalId is required")
    if await goal_repo.delete(store, id=goal_id) is None:
        raise RecordNotFoundError("Goal not found")
    return {"success": True}


@router.get("/achievements", response_model=List[Achievement])
async def list_achievements(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    """A user's achievements, most recent first."""
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return await achievement_repo.get_by_user(store, user_id)


@router.post("/achievements", response_model=Achievement, status_code=201)
async def create_achievement(body: AchievementCreate, store: ArrayStore = Depends(get_store)):
    if not body.user_id or not body.title:
        raise HTTPException(status_code=400, detail="userId and title are required")
    return await achievement_repo.create(
        store,
        obj_in={
            "user_id": body.user_id,
            "title": body.title,
            "description": body.description,
            "icon": body.icon,
            "date": body.date or today(),
        },
    )


@router.delete("/achievements")
async def delete_achievement(
    achievement_id: Optional[str] = Query(None, alias="achievementId"),
    store: ArrayStore = Depends(get_store),
):
    if not achievement_id:
        raise HTTPException(status_code=400, detail="achievementId is required")
    if await achievement_repo.delete(store, id=achievement_id) is None:
        raise RecordNotFoundError("Achievement not found")
    return {"success": True}
