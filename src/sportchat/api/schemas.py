"""
Pydantic schemas for API request bodies.

Request bodies keep the camelCase keys the web client sends. Every field is
optional at the schema level so that a missing value produces the route's
own 400 message instead of a generic validation error.
"""

from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..database.models import Exercise


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Users & Auth
# =============================================================================

class UserCreate(CamelModel):
    """Registration / profile update body."""
    name: Optional[str] = None
    email: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None


class UserResponse(BaseModel):
    """Public view of a user."""
    id: str
    name: str
    email: str
    created_at: datetime


# =============================================================================
# Days & Chat
# =============================================================================

class DayCreate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    date: Optional[date_type] = None


class ChatMessageCreate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    day_id: Optional[str] = Field(default=None, alias="dayId")
    message: Optional[str] = None
    is_user: Optional[bool] = Field(default=None, alias="isUser")


class ProcessMessageRequest(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    day_id: Optional[str] = Field(default=None, alias="dayId")
    message: Optional[str] = None


class WebhookProxyRequest(CamelModel):
    message: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None


# =============================================================================
# Workouts
# =============================================================================

class WorkoutCreate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    day_id: Optional[str] = Field(default=None, alias="dayId")
    chat_message_id: Optional[str] = Field(default=None, alias="chatMessageId")
    exercises: Optional[List[Exercise]] = None


class WorkoutUpdate(CamelModel):
    workout_id: Optional[str] = Field(default=None, alias="workoutId")
    exercises: Optional[List[Exercise]] = None


# =============================================================================
# Goals & Achievements
# =============================================================================

class GoalCreate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    title: Optional[str] = None
    description: Optional[str] = None
    target_value: Optional[float] = Field(default=None, alias="targetValue")
    current_value: float = Field(default=0, alias="currentValue")
    unit: Optional[str] = None
    category: str = "fitness"
    due_date: Optional[date_type] = Field(default=None, alias="dueDate")


class GoalUpdate(CamelModel):
    goal_id: Optional[str] = Field(default=None, alias="goalId")
    title: Optional[str] = None
    description: Optional[str] = None
    target_value: Optional[float] = Field(default=None, alias="targetValue")
    current_value: Optional[float] = Field(default=None, alias="currentValue")
    unit: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[date_type] = Field(default=None, alias="dueDate")
    is_completed: Optional[bool] = Field(default=None, alias="isCompleted")


class AchievementCreate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    title: Optional[str] = None
    description: str = ""
    icon: str = "🏆"
    date: Optional[date_type] = None


# =============================================================================
# Settings & Catalogs
# =============================================================================

class ChatSettingsUpdate(CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    show_suggestions: Optional[bool] = None
    show_next_workout_recommendation: Optional[bool] = None


class EquipmentCreate(CamelModel):
    name: Optional[str] = None
    category: Optional[str] = None
    muscle_groups: Optional[List[str]] = None


class MuscleGroupCreate(CamelModel):
    name: Optional[str] = None
    english_name: Optional[str] = None
    category: Optional[str] = None


class UsageUpdate(CamelModel):
    """Load reported for one use of equipment or one workout of a muscle group."""
    id: Optional[str] = None
    weight: Optional[float] = None
    volume: Optional[float] = None
