"""Interactive terminal chat for sportchat."""

import asyncio
import sys

from redis.exceptions import RedisError

from .core import MessageProcessor, ProcessedMessage
from .database.connection import redis_manager
from .database.models import Goal, User
from .database.repository import (
    RecordNotFoundError,
    achievement_repo,
    goal_repo,
    user_repo,
)
from .goals import format_amount
from .webhook import WebhookError, webhook_client


class SportChatCLI:
    """Terminal front end for the same pipeline the HTTP API runs."""

    def __init__(self, email: str) -> None:
        self._email = email
        self._user: User | None = None
        self._processor: MessageProcessor | None = None

    async def initialize(self) -> None:
        await redis_manager.initialize()
        await webhook_client.initialize()
        store = redis_manager.store

        self._user = await user_repo.get_by_email(store, self._email)
        if self._user is None:
            await self.close()
            raise RecordNotFoundError(f"No user with email {self._email}")
        self._processor = MessageProcessor(store, webhook_client)
        print("Connected to Redis and webhook.")

    async def close(self) -> None:
        await webhook_client.close()
        await redis_manager.close()

    async def run(self) -> None:
        await self.initialize()
        print(f"sportchat: {self._user.name} <{self._user.email}>")
        print("Type 'help' for commands or 'exit' to quit.")
        print("-" * 50)

        while True:
            try:
                user_input = input("You: ").strip()
                if not user_input:
                    continue
                command = user_input.lower()
                if command in ("exit", "quit", "выход"):
                    print("Goodbye!")
                    break
                if command == "help":
                    self._show_help()
                    continue
                if command == "goals":
                    print(await self._show_goals())
                    continue
                if command == "achievements":
                    print(await self._show_achievements())
                    continue

                result = await self._processor.process(self._user.id, user_input)
                print(self._render(result))
                print("-" * 50)

            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break
            except (WebhookError, RecordNotFoundError, RedisError) as e:
                print(f"Error: {e}")
                continue

        await self.close()

    @staticmethod
    def _render(result: ProcessedMessage) -> str:
        lines = [f"Bot: {m.message}" for m in result.bot_messages]
        if result.workout is not None:
            lines.append(f"  [workout {result.workout.id}: {len(result.workout.exercises)} exercises]")
        return "\n".join(lines) or "Bot: (no reply)"

    async def _show_goals(self) -> str:
        goals = await goal_repo.get_active(redis_manager.store, self._user.id)
        if not goals:
            return "No active goals."
        return "\n".join(["Active goals:"] + [self._format_goal(g) for g in goals])

    @staticmethod
    def _format_goal(goal: Goal) -> str:
        return (
            f"  {goal.title}: {format_amount(goal.current_value)}/"
            f"{format_amount(goal.target_value, goal.unit)} ({goal.progress_percent}%)"
        )

    async def _show_achievements(self) -> str:
        achievements = await achievement_repo.get_by_user(redis_manager.store, self._user.id)
        if not achievements:
            return "No achievements yet."
        return "\n".join(
            f"  {a.icon} {a.title} ({a.date.isoformat()})" for a in achievements
        )

    def _show_help(self) -> None:
        print(
            "sportchat Commands:\n"
            "\n"
            "  Log a workout:\n"
            '    "подтянулся 3 подхода по 10 раз"\n'
            '    "пробежал 5.5 км"\n'
            "\n"
            "  goals         - show active goals\n"
            "  achievements  - show achievements\n"
            "  help          - show this message\n"
            "  exit          - quit"
        )


async def main(email: str) -> None:
    cli = SportChatCLI(email)
    await cli.run()


def main_sync() -> None:
    """Entry point for pyproject.toml console_scripts."""
    if len(sys.argv) != 2:
        print("Usage: sportchat <email>")
        sys.exit(2)
    try:
        asyncio.run(main(sys.argv[1]))
    except RecordNotFoundError as e:
        print(e)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nGoodbye!")
        sys.exit(0)


if __name__ == "__main__":
    main_sync()
