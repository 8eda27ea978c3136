"""Goal progress from logged exercises.

Exercise names and goal titles are free Russian text, so matching is done
with keyword stems: a goal tracks an exercise when both mention the same
movement. Completed goals become achievements and are deleted.
"""

import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional

from .database.models import Exercise, Goal, today
from .database.repository import achievement_repo, goal_repo, workout_repo
from .database.store import ArrayStore

logger = logging.getLogger(__name__)

CARDIO_KEYWORDS = ("ходьб", "прогулк", "шаг", "ходил", "бег", "пробеж", "бежал")

# Number followed by "км"; both "5.5" and "5,5" are accepted.
DISTANCE_KM_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*км", re.IGNORECASE)

FREQUENCY_WINDOW_DAYS = 7
TRAIN_KEYWORDS = ("трениров", "тренир", "занят", "занима")
TIMES_KEYWORDS = ("раз",)
WEEK_KEYWORDS = ("недел",)


@dataclass(frozen=True)
class MatchRule:
    """Pairs exercise-name stems with goal-title stems for one movement."""

    category: str
    exercise_keywords: tuple[str, ...]
    goal_keywords: tuple[str, ...]

    def matches(self, exercise_name: str, goal_title: str) -> bool:
        return any(k in exercise_name for k in self.exercise_keywords) and any(
            k in goal_title for k in self.goal_keywords
        )


GOAL_MATCH_RULES: tuple[MatchRule, ...] = (
    MatchRule(
        "pull_ups",
        ("подтягивани", "подтягива"),
        ("подтягива", "подтягат", "подтянут"),
    ),
    MatchRule("squats", ("приседани", "приседа"), ("приседа", "присест")),
    MatchRule("push_ups", ("отжимани", "отжима"), ("отжима", "отжат")),
    MatchRule("plank", ("планк",), ("планк",)),
    MatchRule("abs", ("пресс",), ("пресс",)),
    MatchRule(
        "walking",
        ("ходьб", "прогулк", "шаг", "ходил"),
        ("ходьб", "ходит", "прогулк", "шаг", "пройти", "пройд"),
    ),
    MatchRule(
        "running",
        ("бег", "пробеж", "бежал"),
        ("бег", "пробеж", "бежат"),
    ),
)

# First matching row wins; keyed on the goal title.
ACHIEVEMENT_ICONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("подтягива", "подтягат", "подтянут"), "💪"),
    (("приседа", "присест"), "🦵"),
    (("отжима", "отжат"), "🏋️"),
    (("планк",), "🧘"),
    (("пресс",), "🔥"),
    (("бег", "пробеж", "бежат"), "🏃"),
    (("ходьб", "ходит", "прогулк", "шаг", "пройти", "пройд"), "🚶"),
    (TRAIN_KEYWORDS, "📅"),
)
DEFAULT_ACHIEVEMENT_ICON = "🏆"


def is_cardio(exercise_name: str) -> bool:
    name = exercise_name.lower()
    return any(k in name for k in CARDIO_KEYWORDS)


def parse_distance_km(text: str) -> Optional[float]:
    """First distance in kilometres mentioned in ``text``, if any."""
    match = DISTANCE_KM_RE.search(text or "")
    if not match:
        return None
    return float(match.group(1).replace(",", "."))


def exercise_value(exercise: Exercise, message: str = "") -> float:
    """How much an exercise counts towards a goal.

    Rep-based exercises count ``reps * sets``. Cardio entries carry
    kilometres in ``reps``; the agent falls back to ``reps=1`` when it cannot
    quantify a run or walk, so in that case the distance is read from the
    original message instead.
    """
    if not is_cardio(exercise.name):
        return exercise.reps * exercise.sets
    if exercise.reps == 1:
        distance = parse_distance_km(message)
        if distance is not None:
            return distance
    return exercise.reps


def match_category(exercise_name: str, goal_title: str) -> Optional[str]:
    """Category of the first rule linking the exercise to the goal, or None."""
    name = exercise_name.lower()
    title = goal_title.lower()
    for rule in GOAL_MATCH_RULES:
        if rule.matches(name, title):
            return rule.category
    return None


def is_frequency_goal(goal_title: str) -> bool:
    """Goals like "Тренироваться 4 раза в неделю" count training days.

    A title that names a movement ("Тренировать пресс 100 раз") needs the
    week stem; "раз" alone means a rep count there.
    """
    title = goal_title.lower()
    if not any(k in title for k in TRAIN_KEYWORDS):
        return False
    if any(k in title for k in WEEK_KEYWORDS):
        return True
    names_movement = any(
        k in title for rule in GOAL_MATCH_RULES for k in rule.goal_keywords
    )
    return not names_movement and any(k in title for k in TIMES_KEYWORDS)


def achievement_icon(goal_title: str) -> str:
    title = goal_title.lower()
    for keywords, icon in ACHIEVEMENT_ICONS:
        if any(k in title for k in keywords):
            return icon
    return DEFAULT_ACHIEVEMENT_ICON


def format_amount(value: float, unit: Optional[str] = None) -> str:
    text = f"{round(value, 2):g}"
    return f"{text} {unit}" if unit else text


def completion_message(goal: Goal) -> str:
    return (
        f"🎉 Поздравляю! Цель «{goal.title}» выполнена: "
        f"{format_amount(goal.target_value, goal.unit)}! Новое достижение добавлено."
    )


def progress_message(goal: Goal) -> str:
    remaining = goal.target_value - goal.current_value
    return (
        f"📈 Прогресс по цели «{goal.title}»: "
        f"{format_amount(goal.current_value)}/{format_amount(goal.target_value, goal.unit)} "
        f"({goal.progress_percent}%). Осталось: {format_amount(remaining, goal.unit)}"
    )


class GoalTracker:
    """Applies logged training to a user's goals."""

    def __init__(self, store: ArrayStore) -> None:
        self._store = store

    async def apply_exercises(
        self, user_id: str, exercises: List[Exercise], message: str = ""
    ) -> List[str]:
        """Advance every goal matched by the exercises. Returns chat messages."""
        goals = [
            g
            for g in await goal_repo.get_active(self._store, user_id)
            if not is_frequency_goal(g.title)
        ]
        messages: List[str] = []

        for exercise in exercises:
            value = exercise_value(exercise, message)
            logger.debug("Exercise %r counts as %s", exercise.name, value)
            for goal in list(goals):
                if match_category(exercise.name, goal.title) is None:
                    continue
                try:
                    advanced = await self._advance(
                        goal, lambda g, v=value: g.current_value + v
                    )
                except Exception:
                    logger.exception("Failed to update goal %s (%s)", goal.id, goal.title)
                    continue
                if advanced is None:
                    goals.remove(goal)
                    continue
                updated, text = advanced
                messages.append(text)
                if updated.is_completed:
                    goals.remove(goal)
                else:
                    goals[goals.index(goal)] = updated

        return messages

    async def apply_training_frequency(self, user_id: str) -> List[str]:
        """Raise frequency goals to the number of training days this week."""
        frequency_goals = [
            g
            for g in await goal_repo.get_active(self._store, user_id)
            if is_frequency_goal(g.title)
        ]
        if not frequency_goals:
            return []

        since = today() - timedelta(days=FREQUENCY_WINDOW_DAYS - 1)
        days_trained = len(
            await workout_repo.get_training_dates(self._store, user_id, since=since)
        )

        messages: List[str] = []
        for goal in frequency_goals:
            if days_trained <= goal.current_value:
                continue
            try:
                advanced = await self._advance(
                    goal, lambda g: max(g.current_value, days_trained)
                )
            except Exception:
                logger.exception("Failed to update frequency goal %s (%s)", goal.id, goal.title)
                continue
            if advanced is not None:
                messages.append(advanced[1])
        return messages

    async def _advance(
        self, goal: Goal, compute: Callable[[Goal], float]
    ) -> Optional[tuple[Goal, str]]:
        """Store a new value; a reached target turns the goal into an achievement.

        Returns None when the goal was deleted or completed by someone else
        in the meantime.
        """
        updated = await goal_repo.set_progress(self._store, goal.id, compute)
        if updated is None:
            logger.info("Goal %s no longer exists, skipping", goal.id)
            return None

        if updated.is_completed:
            if await goal_repo.delete(self._store, id=goal.id) is None:
                return None
            await self._record_achievement(updated)
            logger.info("Goal %s completed", goal.id)
            return updated, completion_message(updated)

        logger.info(
            "Goal %s progress: %s/%s", goal.id, updated.current_value, updated.target_value
        )
        return updated, progress_message(updated)

    async def _record_achievement(self, goal: Goal) -> None:
        await achievement_repo.create(
            self._store,
            obj_in={
                "user_id": goal.user_id,
                "title": f"Выполнена цель: {goal.title}",
                "description": goal.description
                or f"Достигнуто {format_amount(goal.target_value, goal.unit)}",
                "icon": achievement_icon(goal.title),
                "date": today(),
            },
        )
