"""
Workout endpoints, including the month-bucketed admin listing.
"""

from collections import OrderedDict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...database.models import Workout, local_date
from ...database.repository import RecordNotFoundError, workout_repo
from ...database.store import ArrayStore
from ..dependencies import get_store
from ..schemas import WorkoutCreate, WorkoutUpdate

router = APIRouter(tags=["workouts"])


def month_key(workout: Workout) -> str:
    day = local_date(workout.created_at)
    return f"{day.year}-{day.month:02d}"


@router.get("/workouts", response_model=List[Workout])
async def list_workouts(
    user_id: Optional[str] = Query(None, alias="userId"),
    day_id: Optional[str] = Query(None, alias="dayId"),
    store: ArrayStore = Depends(get_store),
):
    """Workouts of one day when ``dayId`` is given, else all of the user's."""
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    if day_id:
        return await workout_repo.get_by_day(store, day_id)
    return await workout_repo.get_by_user(store, user_id)


@router.post("/workouts", response_model=Workout, status_code=201)
async def create_workout(body: WorkoutCreate, store: ArrayStore = Depends(get_store)):
    if not body.user_id or not body.day_id or not body.chat_message_id or body.exercises is None:
        raise HTTPException(
            status_code=400,
            detail="userId, dayId, chatMessageId, and exercises are required",
        )
    return await workout_repo.log(
        store, body.user_id, body.day_id, body.chat_message_id, body.exercises
    )


@router.put("/workouts", response_model=Workout)
async def update_workout(body: WorkoutUpdate, store: ArrayStore = Depends(get_store)):
    if not body.workout_id or body.exercises is None:
        raise HTTPException(status_code=400, detail="workoutId and exercises are required")
    workout = await workout_repo.update(
        store, body.workout_id, obj_in={"exercises": body.exercises}
    )
    if workout is None:
        raise RecordNotFoundError("Workout not found")
    return workout


@router.delete("/workouts")
async def delete_workout(
    workout_id: Optional[str] = Query(None, alias="workoutId"),
    store: ArrayStore = Depends(get_store),
):
    if not workout_id:
        raise HTTPException(status_code=400, detail="workoutId is required")
    if await workout_repo.delete(store, id=workout_id) is None:
        raise RecordNotFoundError("Workout not found")
    return {"success": True}


@router.get("/admin/workouts")
async def list_workouts_by_month(
    action: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    """Summaries of a user's workouts grouped by ``YYYY-MM``, newest month first."""
    if action != "list-by-month":
        raise HTTPException(status_code=400, detail="Invalid action")
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")

    by_month: OrderedDict[str, list] = OrderedDict()
    for workout in await workout_repo.get_by_user(store, user_id):
        by_month.setdefault(month_key(workout), []).append(
            {
                "id": workout.id,
                "created_at": workout.created_at,
                "day_id": workout.day_id,
                "exercises_count": len(workout.exercises),
            }
        )
    return by_month


@router.delete("/admin/workouts")
async def delete_workouts_by_month(
    months: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    """Delete a user's workouts created in any of the comma-separated months."""
    selected = [m.strip() for m in (months or "").split(",") if m.strip()]
    if not selected:
        raise HTTPException(status_code=400, detail="No months specified")
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")

    deleted = await workout_repo.delete_where(
        store, lambda w: w.user_id == user_id and month_key(w) in selected
    )
    return {"success": True, "deleted_count": deleted, "deleted_months": selected}
