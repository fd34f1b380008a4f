"""Rotas da API."""

from .auth import router as auth_router
from .users import router as users_router
from .leads import router as leads_router
from .notes import router as notes_router
from .dashboard import router as dashboard_router
from .notifications import router as notifications_router
from .health import router as health_router


__all__ = [
    "auth_router",
    "users_router",
    "leads_router",
    "notes_router",
    "dashboard_router",
    "notifications_router",
    "health_router",
]
