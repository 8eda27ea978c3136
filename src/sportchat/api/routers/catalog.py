"""
Shared equipment and muscle group catalogs, plus per-user chat settings.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...database.models import Equipment, MuscleGroup
from ...database.repository import (
    RecordNotFoundError,
    chat_settings_repo,
    equipment_repo,
    muscle_group_repo,
)
from ...database.store import ArrayStore
from ..dependencies import get_store
from ..schemas import ChatSettingsUpdate, EquipmentCreate, MuscleGroupCreate, UsageUpdate

router = APIRouter(tags=["catalog"])


@router.get("/equipment", response_model=List[Equipment])
async def list_equipment(store: ArrayStore = Depends(get_store)):
    return await equipment_repo.get_all(store)


@router.post("/equipment", response_model=Equipment)
async def create_equipment(body: EquipmentCreate, store: ArrayStore = Depends(get_store)):
    if not body.name or not body.category or not body.muscle_groups:
        raise HTTPException(
            status_code=400, detail="name, category, and muscle_groups are required"
        )
    return await equipment_repo.create(
        store,
        obj_in={
            "name": body.name,
            "category": body.category,
            "muscle_groups": body.muscle_groups,
        },
    )


@router.put("/equipment", response_model=Equipment)
async def record_equipment_usage(body: UsageUpdate, store: ArrayStore = Depends(get_store)):
    """Count one use of a piece of equipment."""
    if not body.id:
        raise HTTPException(status_code=400, detail="id is required")
    equipment = await equipment_repo.record_usage(store, body.id, body.weight, body.volume)
    if equipment is None:
        raise RecordNotFoundError("Equipment not found")
    return equipment


@router.get("/muscle-groups", response_model=List[MuscleGroup])
async def list_muscle_groups(store: ArrayStore = Depends(get_store)):
    return await muscle_group_repo.get_all(store)


@router.post("/muscle-groups", response_model=MuscleGroup)
async def create_muscle_group(body: MuscleGroupCreate, store: ArrayStore = Depends(get_store)):
    if not body.name or not body.english_name or not body.category:
        raise HTTPException(
            status_code=400, detail="name, english_name, and category are required"
        )
    return await muscle_group_repo.create(
        store,
        obj_in={
            "name": body.name,
            "english_name": body.english_name,
            "category": body.category,
        },
    )


@router.put("/muscle-groups", response_model=MuscleGroup)
async def record_muscle_group_workout(
    body: UsageUpdate, store: ArrayStore = Depends(get_store)
):
    if not body.id or body.weight is None or body.volume is None:
        raise HTTPException(status_code=400, detail="id, weight, and volume are required")
    group = await muscle_group_repo.record_workout(store, body.id, body.weight, body.volume)
    if group is None:
        raise RecordNotFoundError("Muscle group not found")
    return group


@router.get("/chat-settings")
async def get_chat_settings(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: ArrayStore = Depends(get_store),
):
    """Settings of a user, created with defaults on first read."""
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    settings = await chat_settings_repo.get_or_create(store, user_id)
    return {"success": True, "settings": settings}


@router.put("/chat-settings")
async def update_chat_settings(
    body: ChatSettingsUpdate, store: ArrayStore = Depends(get_store)
):
    if not body.user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    updates = body.model_dump(
        include={"show_suggestions", "show_next_workout_recommendation"},
        exclude_none=True,
    )
    await chat_settings_repo.get_or_create(store, body.user_id)
    settings = await chat_settings_repo.update_for_user(store, body.user_id, updates)
    return {"success": True, "settings": settings}
