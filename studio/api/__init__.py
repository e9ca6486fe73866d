"""FastAPI routers and dependencies."""

from studio.api.deps import get_factory, get_hub, get_store
from studio.api.editor import router as editor_router
from studio.api.preview import router as preview_router
from studio.api.projects import router as projects_router

__all__ = [
    "get_factory",
    "get_hub",
    "get_store",
    "editor_router",
    "preview_router",
    "projects_router",
]
