"""GoalTracker against stored goals, workouts and achievements."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from sportchat.database.models import Exercise
from sportchat.database.repository import achievement_repo, goal_repo, workout_repo
from sportchat.goals import GoalTracker


async def _goal(store, user, title, target, current=0, unit="раз"):
    return await goal_repo.create(
        store,
        obj_in={
            "user_id": user.id,
            "title": title,
            "target_value": target,
            "current_value": current,
            "unit": unit,
        },
    )


@pytest.fixture
def tracker(store):
    return GoalTracker(store)


@pytest.mark.asyncio
async def test_progress_is_recorded(store, user, tracker):
    goal = await _goal(store, user, "Подтянуться 100 раз", 100)

    messages = await tracker.apply_exercises(
        user.id, [Exercise(name="Подтягивания", reps=10, sets=3)]
    )

    assert messages == [
        "📈 Прогресс по цели «Подтянуться 100 раз»: 30/100 раз (30%). Осталось: 70 раз"
    ]
    assert (await goal_repo.get(store, goal.id)).current_value == 30


@pytest.mark.asyncio
async def test_reaching_target_creates_achievement_and_removes_goal(store, user, tracker):
    goal = await _goal(store, user, "Подтянуться 100 раз", 100, current=90)

    messages = await tracker.apply_exercises(
        user.id, [Exercise(name="Подтягивания", reps=10, sets=2)]
    )

    assert len(messages) == 1
    assert messages[0].startswith("🎉 Поздравляю! Цель «Подтянуться 100 раз» выполнена")
    assert await goal_repo.get(store, goal.id) is None

    achievements = await achievement_repo.get_by_user(store, user.id)
    assert len(achievements) == 1
    assert achievements[0].title == "Выполнена цель: Подтянуться 100 раз"
    assert achievements[0].icon == "💪"


@pytest.mark.asyncio
async def test_completed_goal_is_not_advanced_twice(store, user, tracker):
    await _goal(store, user, "Подтянуться 20 раз", 20)

    messages = await tracker.apply_exercises(
        user.id,
        [
            Exercise(name="Подтягивания", reps=10, sets=2),
            Exercise(name="Подтягивания", reps=5, sets=1),
        ],
    )

    assert len(messages) == 1
    assert len(await achievement_repo.get_by_user(store, user.id)) == 1


@pytest.mark.asyncio
async def test_run_distance_comes_from_message(store, user, tracker):
    goal = await _goal(store, user, "Пробежать 10 км", 10, unit="км")

    await tracker.apply_exercises(
        user.id, [Exercise(name="Бег", reps=1, sets=1)], "сегодня пробежал 5.5 км"
    )

    assert (await goal_repo.get(store, goal.id)).current_value == 5.5


@pytest.mark.asyncio
async def test_unmatched_goals_are_untouched(store, user, tracker):
    goal = await _goal(store, user, "Присесть 200 раз", 200)

    messages = await tracker.apply_exercises(
        user.id, [Exercise(name="Отжимания", reps=20, sets=3)]
    )

    assert messages == []
    assert (await goal_repo.get(store, goal.id)).current_value == 0


@pytest.mark.asyncio
async def test_other_users_goals_are_untouched(store, user, tracker):
    goal = await goal_repo.create(
        store,
        obj_in={"user_id": "user-someone", "title": "Подтянуться 100 раз", "target_value": 100},
    )

    await tracker.apply_exercises(user.id, [Exercise(name="Подтягивания", reps=10)])

    assert (await goal_repo.get(store, goal.id)).current_value == 0


@pytest.mark.asyncio
async def test_frequency_goal_ignores_exercises(store, user, tracker):
    goal = await _goal(store, user, "Тренироваться 4 раза в неделю", 4, unit="раз")

    messages = await tracker.apply_exercises(
        user.id, [Exercise(name="Тренировка", reps=10, sets=3)]
    )

    assert messages == []
    assert (await goal_repo.get(store, goal.id)).current_value == 0


@pytest.mark.asyncio
async def test_frequency_goal_counts_distinct_training_days(store, user, tracker):
    goal = await _goal(store, user, "Тренироваться 4 раза в неделю", 4)
    now = datetime.now(timezone.utc)
    for moment in (now, now, now - timedelta(days=1), now - timedelta(days=10)):
        workout = await workout_repo.log(
            store, user.id, "day-x", "msg-x", [Exercise(name="Приседания", reps=10)]
        )
        await workout_repo.update(store, workout.id, obj_in={"created_at": moment})

    messages = await tracker.apply_training_frequency(user.id)

    assert len(messages) == 1
    assert (await goal_repo.get(store, goal.id)).current_value == 2


@pytest.mark.asyncio
async def test_frequency_goal_never_decreases(store, user, tracker):
    goal = await _goal(store, user, "Тренироваться 4 раза в неделю", 4, current=3)
    await workout_repo.log(store, user.id, "day-x", "msg-x", [Exercise(name="Бег", reps=3)])

    messages = await tracker.apply_training_frequency(user.id)

    assert messages == []
    assert (await goal_repo.get(store, goal.id)).current_value == 3


@pytest.mark.asyncio
async def test_frequency_goal_completes(store, user, tracker):
    await _goal(store, user, "Тренироваться 1 раз в неделю", 1)
    await workout_repo.log(store, user.id, "day-x", "msg-x", [Exercise(name="Бег", reps=3)])

    messages = await tracker.apply_training_frequency(user.id)

    assert messages[0].startswith("🎉")
    achievements = await achievement_repo.get_by_user(store, user.id)
    assert achievements[0].icon == "📅"


@pytest.mark.asyncio
async def test_pull_up_goal_completion_scenario(store, user, tracker):
    goal = await _goal(store, user, "Подтянуться 20 раз", 20, current=15)

    await tracker.apply_exercises(user.id, [Exercise(name="подтягивания", reps=5, sets=1)])

    assert await goal_repo.get_by_user(store, user.id) == []
    assert await goal_repo.get(store, goal.id) is None
    achievements = await achievement_repo.get_by_user(store, user.id)
    assert [a.title for a in achievements] == ["Выполнена цель: Подтянуться 20 раз"]


@pytest.mark.asyncio
async def test_jog_distance_scenario(store, user, tracker):
    goal = await _goal(store, user, "Пробежать 42 км", 42, unit="км")

    await tracker.apply_exercises(
        user.id, [Exercise(name="пробежка", reps=1, sets=1)], "пробежал 5.5 км"
    )

    assert (await goal_repo.get(store, goal.id)).current_value == 5.5


@pytest.mark.asyncio
async def test_one_exercise_advances_every_matching_goal(store, user, tracker):
    first = await _goal(store, user, "Подтянуться 100 раз", 100)
    second = await _goal(store, user, "Подтягивания: 500 за месяц", 500)

    messages = await tracker.apply_exercises(user.id, [Exercise(name="Подтягивания", reps=10)])

    assert len(messages) == 2
    assert (await goal_repo.get(store, first.id)).current_value == 10
    assert (await goal_repo.get(store, second.id)).current_value == 10


@pytest.mark.asyncio
async def test_concurrent_completion_creates_one_achievement(store, user, tracker):
    await _goal(store, user, "Подтянуться 10 раз", 10, current=5)
    exercise = [Exercise(name="Подтягивания", reps=10)]

    await asyncio.gather(
        tracker.apply_exercises(user.id, exercise),
        GoalTracker(store).apply_exercises(user.id, exercise),
    )

    assert len(await achievement_repo.get_by_user(store, user.id)) == 1
    assert await goal_repo.get_by_user(store, user.id) == []


@pytest.mark.asyncio
async def test_failed_goal_update_does_not_stop_others(store, user, tracker, monkeypatch):
    broken = await _goal(store, user, "Подтянуться 100 раз", 100)
    healthy = await _goal(store, user, "Подтягивания: 500 за месяц", 500)
    set_progress = goal_repo.set_progress

    async def failing_for_broken(store_, id, compute):
        if id == broken.id:
            raise RuntimeError("storage hiccup")
        return await set_progress(store_, id, compute)

    monkeypatch.setattr(goal_repo, "set_progress", failing_for_broken)

    messages = await tracker.apply_exercises(user.id, [Exercise(name="Подтягивания", reps=10)])

    assert len(messages) == 1
    assert "Подтягивания: 500 за месяц" in messages[0]
    assert (await goal_repo.get(store, healthy.id)).current_value == 10
    assert (await goal_repo.get(store, broken.id)).current_value == 0


@pytest.mark.asyncio
async def test_rep_goal_mentioning_training_counts_exercises(store, user, tracker):
    goal = await _goal(store, user, "Тренировать пресс 100 раз", 100)
    await workout_repo.log(store, user.id, "day-x", "msg-x", [Exercise(name="Пресс", reps=20)])

    assert await tracker.apply_training_frequency(user.id) == []
    await tracker.apply_exercises(user.id, [Exercise(name="Пресс", reps=20, sets=2)])

    assert (await goal_repo.get(store, goal.id)).current_value == 40
