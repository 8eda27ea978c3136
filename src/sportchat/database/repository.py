"""Async repository pattern implementation over the whole-array store."""

import logging
from datetime import date as date_type, datetime, timezone
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError

from .models import (
    Achievement,
    ChatMessage,
    ChatSettings,
    Day,
    Equipment,
    Exercise,
    Goal,
    MuscleGroup,
    Record,
    User,
    Workout,
    generate_id,
    local_date,
    today,
)
from .store import ArrayStore

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Record)
T = TypeVar("T")


class RecordNotFoundError(LookupError):
    """Raised when a record referenced by id does not exist."""


class DuplicateRecordError(ValueError):
    """Raised when a create or update would break a uniqueness rule."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository(Generic[ModelType]):
    """Base repository with async CRUD operations on one array key."""

    def __init__(self, model: Type[ModelType], key: str, id_prefix: str) -> None:
        self.model = model
        self.key = key
        self.id_prefix = id_prefix

    def _split(self, rows: List[dict]) -> tuple[List[ModelType], List[Any]]:
        """Separate rows that validate from rows that do not."""
        records: List[ModelType] = []
        malformed: List[Any] = []
        for row in rows:
            try:
                records.append(self.model.model_validate(row))
            except ValidationError:
                logger.warning("Skipping malformed %s record: %r", self.key, row)
                malformed.append(row)
        return records, malformed

    def _parse(self, rows: List[dict]) -> List[ModelType]:
        return self._split(rows)[0]

    async def _mutate(
        self, store: ArrayStore, change: Callable[[List[ModelType]], T]
    ) -> T:
        """Run ``change`` on the parsed records and store the result atomically.

        Rows that fail validation are written back untouched.
        """

        def apply(rows: List[dict]) -> T:
            records, malformed = self._split(rows)
            result = change(records)
            rows[:] = malformed + [r.to_storage() for r in records]
            return result

        return await store.update_array(self.key, apply)

    async def get_all(self, store: ArrayStore) -> List[ModelType]:
        """Get every record stored under this repository's key."""
        return self._parse(await store.read_array(self.key))

    async def get(self, store: ArrayStore, id: str) -> Optional[ModelType]:
        """Get a single record by ID."""
        for record in await self.get_all(store):
            if record.id == id:
                return record
        return None

    async def create(self, store: ArrayStore, *, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(id=generate_id(self.id_prefix), **obj_in)
        await self._mutate(store, lambda records: records.append(db_obj))
        return db_obj

    async def create_unique(
        self,
        store: ArrayStore,
        *,
        obj_in: dict,
        clashes: Callable[[ModelType, ModelType], bool],
        message: str,
    ) -> ModelType:
        """Create a record unless ``clashes(existing, new)`` holds for any stored one."""
        db_obj = self.model(id=generate_id(self.id_prefix), **obj_in)

        def change(records: List[ModelType]) -> None:
            if any(clashes(record, db_obj) for record in records):
                raise DuplicateRecordError(message)
            records.append(db_obj)

        await self._mutate(store, change)
        return db_obj

    async def update(
        self, store: ArrayStore, id: str, *, obj_in: dict
    ) -> Optional[ModelType]:
        """Update fields of an existing record. Returns None if it is missing."""
        update_data = {k: v for k, v in obj_in.items() if k in self.model.model_fields}
        if "updated_at" in self.model.model_fields:
            update_data.setdefault("updated_at", _now())

        def change(records: List[ModelType]) -> Optional[ModelType]:
            for index, record in enumerate(records):
                if record.id == id:
                    records[index] = self.model.model_validate(
                        {**record.model_dump(), **update_data}
                    )
                    return records[index]
            return None

        return await self._mutate(store, change)

    async def delete(self, store: ArrayStore, *, id: str) -> Optional[ModelType]:
        """Delete a record by ID."""

        def change(records: List[ModelType]) -> Optional[ModelType]:
            for index, record in enumerate(records):
                if record.id == id:
                    return records.pop(index)
            return None

        return await self._mutate(store, change)

    async def delete_where(
        self, store: ArrayStore, predicate: Callable[[ModelType], bool]
    ) -> int:
        """Delete every record matching ``predicate``. Returns the count removed."""

        def change(records: List[ModelType]) -> int:
            remaining = [r for r in records if not predicate(r)]
            removed = len(records) - len(remaining)
            records[:] = remaining
            return removed

        return await self._mutate(store, change)


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    async def get_by_email(self, store: ArrayStore, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        email = email.strip().lower()
        for user in await self.get_all(store):
            if user.email == email:
                return user
        return None

    async def register(self, store: ArrayStore, name: str, email: str) -> User:
        """Create a user, refusing duplicate emails."""
        return await self.create_unique(
            store,
            obj_in={"name": name, "email": email},
            clashes=lambda existing, new: existing.email == new.email,
            message="User with this email already exists",
        )

    async def update_profile(
        self, store: ArrayStore, user_id: str, name: str, email: str
    ) -> User:
        """Change name and email, keeping emails unique across users."""
        email = email.strip().lower()

        def change(records: List[User]) -> User:
            if any(u.email == email and u.id != user_id for u in records):
                raise DuplicateRecordError("Email already taken")
            for index, user in enumerate(records):
                if user.id == user_id:
                    records[index] = user.model_copy(
                        update={"name": name, "email": email, "updated_at": _now()}
                    )
                    return records[index]
            raise RecordNotFoundError("User not found")

        return await self._mutate(store, change)


class DayRepository(BaseRepository[Day]):
    """Repository for Day operations."""

    async def get_by_user(self, store: ArrayStore, user_id: str) -> List[Day]:
        """Get a user's days, newest date first."""
        days = [d for d in await self.get_all(store) if d.user_id == user_id]
        days.sort(key=lambda d: d.date, reverse=True)
        return days

    async def get_by_date(
        self, store: ArrayStore, user_id: str, day: date_type
    ) -> Optional[Day]:
        for record in await self.get_all(store):
            if record.user_id == user_id and record.date == day:
                return record
        return None

    async def create_for_date(
        self, store: ArrayStore, user_id: str, day: date_type
    ) -> Day:
        """Create a Day, refusing a second Day for the same date."""
        return await self.create_unique(
            store,
            obj_in={"user_id": user_id, "date": day},
            clashes=lambda existing, new: (
                existing.user_id == new.user_id and existing.date == new.date
            ),
            message="День уже существует",
        )

    async def get_or_create(
        self, store: ArrayStore, user_id: str, day: date_type
    ) -> Day:
        existing = await self.get_by_date(store, user_id, day)
        if existing:
            return existing
        try:
            return await self.create_for_date(store, user_id, day)
        except DuplicateRecordError:
            # Another request created it after our read.
            return await self.get_by_date(store, user_id, day)

    async def delete_with_contents(self, store: ArrayStore, day_id: str) -> Day:
        """Delete a Day together with its workouts and chat messages.

        Goals and achievements belong to the user, not the day, and stay.
        """
        day = await self.delete(store, id=day_id)
        if day is None:
            raise RecordNotFoundError("Day not found")
        await workout_repo.delete_where(store, lambda w: w.day_id == day_id)
        await chat_message_repo.delete_where(store, lambda m: m.day_id == day_id)
        return day


class ChatMessageRepository(BaseRepository[ChatMessage]):
    """Repository for ChatMessage operations."""

    async def get_by_day(self, store: ArrayStore, day_id: str) -> List[ChatMessage]:
        """Get the messages of a day in chronological order."""
        messages = [m for m in await self.get_all(store) if m.day_id == day_id]
        messages.sort(key=lambda m: m.timestamp)
        return messages

    async def add(
        self,
        store: ArrayStore,
        user_id: str,
        day_id: str,
        message: str,
        is_user: bool,
    ) -> ChatMessage:
        return await self.create(
            store,
            obj_in={
                "user_id": user_id,
                "day_id": day_id,
                "message": message,
                "is_user": is_user,
            },
        )


class WorkoutRepository(BaseRepository[Workout]):
    """Repository for Workout operations."""

    async def get_by_day(self, store: ArrayStore, day_id: str) -> List[Workout]:
        workouts = [w for w in await self.get_all(store) if w.day_id == day_id]
        workouts.sort(key=lambda w: w.created_at)
        return workouts

    async def get_by_user(self, store: ArrayStore, user_id: str) -> List[Workout]:
        """Get a user's workouts, most recent first."""
        workouts = [w for w in await self.get_all(store) if w.user_id == user_id]
        workouts.sort(key=lambda w: w.created_at, reverse=True)
        return workouts

    async def log(
        self,
        store: ArrayStore,
        user_id: str,
        day_id: str,
        chat_message_id: str,
        exercises: List[Exercise],
    ) -> Workout:
        return await self.create(
            store,
            obj_in={
                "user_id": user_id,
                "day_id": day_id,
                "chat_message_id": chat_message_id,
                "exercises": exercises,
            },
        )

    async def get_training_dates(
        self, store: ArrayStore, user_id: str, *, since: date_type
    ) -> set[date_type]:
        """Distinct local calendar dates with at least one workout on or after ``since``."""
        dates = set()
        for workout in await self.get_by_user(store, user_id):
            day = local_date(workout.created_at)
            if day >= since:
                dates.add(day)
        return dates


class GoalRepository(BaseRepository[Goal]):
    """Repository for Goal operations."""

    async def get_by_user(self, store: ArrayStore, user_id: str) -> List[Goal]:
        return [g for g in await self.get_all(store) if g.user_id == user_id]

    async def get_active(self, store: ArrayStore, user_id: str) -> List[Goal]:
        return [g for g in await self.get_by_user(store, user_id) if not g.is_completed]

    async def set_progress(
        self, store: ArrayStore, id: str, compute: Callable[[Goal], float]
    ) -> Optional[Goal]:
        """Set ``current_value`` to ``compute(goal)`` clamped to the target.

        ``compute`` sees the stored goal, so concurrent updates add up. The
        goal is flagged completed once the target is reached; None means the
        goal is missing or was already completed.
        """

        def change(records: List[Goal]) -> Optional[Goal]:
            for index, goal in enumerate(records):
                if goal.id != id or goal.is_completed:
                    continue
                value = min(goal.target_value, compute(goal))
                records[index] = goal.model_copy(
                    update={
                        "current_value": value,
                        "is_completed": value >= goal.target_value,
                        "updated_at": _now(),
                    }
                )
                return records[index]
            return None

        return await self._mutate(store, change)


class AchievementRepository(BaseRepository[Achievement]):
    """Repository for Achievement operations."""

    async def get_by_user(self, store: ArrayStore, user_id: str) -> List[Achievement]:
        achievements = [a for a in await self.get_all(store) if a.user_id == user_id]
        achievements.sort(key=lambda a: a.created_at, reverse=True)
        return achievements


class ChatSettingsRepository(BaseRepository[ChatSettings]):
    """Repository for per-user chat settings."""

    async def get_by_user(self, store: ArrayStore, user_id: str) -> Optional[ChatSettings]:
        for settings in await self.get_all(store):
            if settings.user_id == user_id:
                return settings
        return None

    async def get_or_create(self, store: ArrayStore, user_id: str) -> ChatSettings:
        settings = await self.get_by_user(store, user_id)
        if settings is None:
            settings = await self.create(store, obj_in={"user_id": user_id})
            logger.info("Default chat settings created for %s", user_id)
        return settings

    async def update_for_user(
        self, store: ArrayStore, user_id: str, updates: dict[str, Any]
    ) -> ChatSettings:
        settings = await self.get_by_user(store, user_id)
        if settings is None:
            raise RecordNotFoundError("Chat settings not found")
        return await self.update(store, settings.id, obj_in=updates)


class EquipmentRepository(BaseRepository[Equipment]):
    """Repository for the shared equipment catalog."""

    async def record_usage(
        self, store: ArrayStore, id: str, weight: float | None, volume: float | None
    ) -> Optional[Equipment]:
        """Count one more use of a piece of equipment and fold in its load."""

        def change(records: List[Equipment]) -> Optional[Equipment]:
            for index, eq in enumerate(records):
                if eq.id != id:
                    continue
                records[index] = eq.model_copy(
                    update={
                        "usage_count": eq.usage_count + 1,
                        "last_used": today(),
                        "max_weight": max(eq.max_weight, weight or 0),
                        "total_volume": eq.total_volume + (volume or 0),
                        "updated_at": _now(),
                    }
                )
                return records[index]
            return None

        return await self._mutate(store, change)


class MuscleGroupRepository(BaseRepository[MuscleGroup]):
    """Repository for the shared muscle group catalog."""

    async def record_workout(
        self, store: ArrayStore, id: str, weight: float, volume: float
    ) -> Optional[MuscleGroup]:
        """Count one more workout for a muscle group. A new max weight trends up."""

        def change(records: List[MuscleGroup]) -> Optional[MuscleGroup]:
            for index, group in enumerate(records):
                if group.id != id:
                    continue
                records[index] = group.model_copy(
                    update={
                        "workouts_count": group.workouts_count + 1,
                        "last_worked": today(),
                        "total_volume": group.total_volume + volume,
                        "max_weight": max(group.max_weight, weight),
                        "progress_trend": "up" if weight > group.max_weight else "stable",
                        "updated_at": _now(),
                    }
                )
                return records[index]
            return None

        return await self._mutate(store, change)


# Repository instances
user_repo = UserRepository(User, "users", "user")
day_repo = DayRepository(Day, "days", "day")
chat_message_repo = ChatMessageRepository(ChatMessage, "chat_messages", "msg")
workout_repo = WorkoutRepository(Workout, "workouts", "workout")
goal_repo = GoalRepository(Goal, "goals", "goal")
achievement_repo = AchievementRepository(Achievement, "achievements", "ach")
chat_settings_repo = ChatSettingsRepository(ChatSettings, "chat_settings", "settings")
equipment_repo = EquipmentRepository(Equipment, "equipment", "eq")
muscle_group_repo = MuscleGroupRepository(MuscleGroup, "muscle_groups", "mg")

USER_OWNED_REPOSITORIES = (
    day_repo,
    chat_message_repo,
    workout_repo,
    goal_repo,
    achievement_repo,
    chat_settings_repo,
)


async def purge_user_data(store: ArrayStore, user_id: str) -> dict[str, int]:
    """Remove a user's records from every array and delete keys naming the user.

    The user record itself is kept. Returns removed counts per array key,
    plus ``user_keys`` for standalone keys.
    """
    counts = {}
    for repo in USER_OWNED_REPOSITORIES:
        counts[repo.key] = await repo.delete_where(store, lambda r: r.user_id == user_id)

    user_keys = [key for key in await store.scan_keys("*") if user_id in key]
    counts["user_keys"] = await store.delete(*user_keys)
    logger.info("Cleared data for user %s: %s", user_id, counts)
    return counts
