"""Pydantic models for SportChat records stored in the key-value store."""

import uuid
from datetime import date as date_type, datetime, timezone
from typing import List, Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator

from ..config import config

APP_TZ = ZoneInfo(config.timezone)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today() -> date_type:
    """Current calendar date in the application timezone."""
    return datetime.now(APP_TZ).date()


def local_date(moment: datetime) -> date_type:
    """Calendar date of ``moment`` in the application timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(APP_TZ).date()


class Record(BaseModel):
    """Base class for all stored records."""

    id: str
    created_at: datetime = Field(default_factory=_now_utc)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id='{self.id}')>"


class User(Record):
    """A registered user. Emails are unique and stored lower-cased."""

    name: str
    email: str
    updated_at: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class Day(Record):
    """One calendar date of a user's chat history."""

    user_id: str
    date: date_type
    updated_at: datetime = Field(default_factory=_now_utc)


class ChatMessage(Record):
    """A single chat line, from the user or from the bot."""

    user_id: str
    day_id: str
    message: str
    is_user: bool
    timestamp: datetime = Field(default_factory=_now_utc)


class Exercise(BaseModel):
    """An exercise entry as parsed by the agent. Embedded in workouts."""

    name: str
    weight: float = 0
    sets: int = 1
    reps: float = 0

    @field_validator("weight", "reps", mode="before")
    @classmethod
    def _zero_if_missing(cls, value):
        return 0 if value is None else value

    @field_validator("sets", mode="before")
    @classmethod
    def _one_if_missing(cls, value):
        return 1 if value is None else value


class Workout(Record):
    """Exercises logged from one user message."""

    user_id: str
    day_id: str
    chat_message_id: str
    exercises: List[Exercise] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_now_utc)


class Goal(Record):
    """A numeric target the user is working towards."""

    user_id: str
    title: str
    description: Optional[str] = None
    current_value: float = 0
    target_value: float
    unit: Optional[str] = None
    category: Optional[str] = "fitness"
    due_date: Optional[date_type] = None
    is_completed: bool = False
    updated_at: datetime = Field(default_factory=_now_utc)

    @property
    def progress_percent(self) -> int:
        if self.target_value <= 0:
            return 100
        return round(self.current_value / self.target_value * 100)


class Achievement(Record):
    """Immutable record of an accomplishment, usually a completed goal."""

    user_id: str
    title: str
    description: str = ""
    icon: str = "🏆"
    date: date_type = Field(default_factory=today)


class ChatSettings(Record):
    """Per-user toggles for the optional parts of bot replies."""

    user_id: str
    show_suggestions: bool = True
    show_next_workout_recommendation: bool = True
    updated_at: datetime = Field(default_factory=_now_utc)


class Equipment(Record):
    """Gym equipment in the shared catalog, with usage statistics."""

    name: str
    category: str
    muscle_groups: List[str] = Field(default_factory=list)
    usage_count: int = 0
    last_used: Optional[date_type] = None
    max_weight: float = 0
    total_volume: float = 0
    updated_at: datetime = Field(default_factory=_now_utc)


class MuscleGroup(Record):
    """Muscle group in the shared catalog, with workload statistics."""

    name: str
    english_name: str
    category: str
    workouts_count: int = 0
    last_worked: Optional[date_type] = None
    total_volume: float = 0
    max_weight: float = 0
    progress_trend: Literal["up", "stable"] = "stable"
    updated_at: datetime = Field(default_factory=_now_utc)
