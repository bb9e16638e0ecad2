"""API routers package.

This package contains all FastAPI routers for the application.
Each router handles a specific domain of the API.
"""

from .pages import router as pages_router
from .versions import router as versions_router

__all__ = [
    "pages_router",
    "versions_router",
]
