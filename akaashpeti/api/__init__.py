"""API routes."""

from .auth_routes import router as auth_router, users_router
from .files import router as files_router
from .folders import router as folders_router
from .share import router as share_router
from .link_shares import router as link_shares_router
from .trash import router as trash_router
from .search import router as search_router
from .uploads import router as uploads_router

__all__ = [
    "auth_router",
    "users_router",
    "files_router",
    "folders_router",
    "share_router",
    "link_shares_router",
    "trash_router",
    "search_router",
    "uploads_router",
]
