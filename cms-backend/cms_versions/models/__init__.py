"""SQLAlchemy ORM models package."""

from .activity_log import ActivityAction, ActivityLog
from .page import Page
from .page_version import PageVersion

__all__ = [
    "ActivityAction",
    "ActivityLog",
    "Page",
    "PageVersion",
]
