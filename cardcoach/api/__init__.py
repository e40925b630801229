from cardcoach.api.health import router as health_router
from cardcoach.api.sets import router as sets_router
from cardcoach.api.users import router as users_router

__all__ = [
    "health_router",
    "sets_router",
    "users_router",
]
