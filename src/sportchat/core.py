"""Core message processing shared by the HTTP API and the terminal chat."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .database.models import ChatMessage, Exercise, Workout, today
from .database.repository import (
    RecordNotFoundError,
    chat_message_repo,
    chat_settings_repo,
    day_repo,
    user_repo,
    workout_repo,
)
from .database.store import ArrayStore
from .goals import GoalTracker
from .webhook import AgentReply, WebhookClient, WebhookError

logger = logging.getLogger(__name__)


class ProcessedMessage(BaseModel):
    """Everything one pass of the pipeline produced."""

    user_message: ChatMessage
    bot_messages: List[ChatMessage] = Field(default_factory=list)
    message: str = ""
    workout_logged: bool = False
    parsed_exercises: List[Exercise] = Field(default_factory=list)
    workout: Optional[Workout] = None
    goal_updates: List[str] = Field(default_factory=list)


def format_suggestions(suggestions: List[str]) -> str:
    lines = ["💡 Рекомендации:"]
    lines.extend(f"{i}. {s}" for i, s in enumerate(suggestions, start=1))
    return "\n".join(lines)


class MessageProcessor:
    """Routes a chat message through the agent webhook to storage and goals."""

    def __init__(self, store: ArrayStore, webhook: WebhookClient) -> None:
        self._store = store
        self._webhook = webhook
        self._goals = GoalTracker(store)

    async def process(
        self, user_id: str, message: str, day_id: Optional[str] = None
    ) -> ProcessedMessage:
        """Persist the message, ask the agent, and apply what it parsed.

        Without ``day_id`` the message goes to today's Day, created on first
        use. Webhook failures raise WebhookError after the user message has
        already been stored; it is not rolled back.
        """
        user = await user_repo.get(self._store, user_id)
        if user is None:
            raise RecordNotFoundError("User not found")

        if day_id is None:
            day = await day_repo.get_or_create(self._store, user_id, today())
            day_id = day.id
        elif await day_repo.get(self._store, day_id) is None:
            raise RecordNotFoundError("Day not found")

        user_message = await chat_message_repo.add(
            self._store, user_id, day_id, message, is_user=True
        )
        logger.info("User message saved: %s", user_message.id)

        payload = await self._webhook.send(message, user.email, user.name)
        if not isinstance(payload, AgentReply):
            raise WebhookError(
                f"Unexpected {payload.kind} payload in reply to a chat message"
            )
        output = payload.output

        result = ProcessedMessage(
            user_message=user_message,
            message=output.message,
            workout_logged=output.workout_logged,
            parsed_exercises=output.parsed_exercises,
        )

        if output.message:
            result.bot_messages.append(await self._reply(user_id, day_id, output.message))

        if output.workout_logged and output.parsed_exercises:
            result.workout = await workout_repo.log(
                self._store, user_id, day_id, user_message.id, output.parsed_exercises
            )
            logger.info(
                "Workout saved: %s (%d exercises)",
                result.workout.id,
                len(output.parsed_exercises),
            )

            result.goal_updates.extend(
                await self._goals.apply_exercises(user_id, output.parsed_exercises, message)
            )
            result.goal_updates.extend(await self._goals.apply_training_frequency(user_id))
            for text in result.goal_updates:
                result.bot_messages.append(await self._reply(user_id, day_id, text))

        settings = await chat_settings_repo.get_or_create(self._store, user_id)
        if output.suggestions and settings.show_suggestions:
            result.bot_messages.append(
                await self._reply(user_id, day_id, format_suggestions(output.suggestions))
            )
        if output.next_workout_recommendation and settings.show_next_workout_recommendation:
            result.bot_messages.append(
                await self._reply(
                    user_id,
                    day_id,
                    f"🗓 Следующая тренировка: {output.next_workout_recommendation}",
                )
            )

        return result

    async def _reply(self, user_id: str, day_id: str, text: str) -> ChatMessage:
        return await chat_message_repo.add(self._store, user_id, day_id, text, is_user=False)
