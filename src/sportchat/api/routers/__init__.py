"""
API routers for the sportchat backend.

Each router handles one area:
- users: accounts, login sessions and profile updates
- days: training days and their chat history
- messages: the chat pipeline, agent proxy and data cleanup
- workouts: workout CRUD and month-based admin tools
- goals: goals and achievements
- catalog: equipment, muscle groups and chat settings
"""

from .catalog import router as catalog_router
from .days import router as days_router
from .goals import router as goals_router
from .messages import router as messages_router
from .users import router as users_router
from .workouts import router as workouts_router

__all__ = [
    "catalog_router",
    "days_router",
    "goals_router",
    "messages_router",
    "users_router",
    "workouts_router",
]
