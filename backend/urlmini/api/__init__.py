"""urlmini API routers."""

from urlmini.api.auth import router as auth_router
from urlmini.api.health import router as health_router
from urlmini.api.links import redirect_router
from urlmini.api.links import router as links_router
from urlmini.api.users import router as users_router

__all__ = [
    "auth_router",
    "health_router",
    "links_router",
    "redirect_router",
    "users_router",
]
