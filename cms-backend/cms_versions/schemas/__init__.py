"""Pydantic schemas package for request/response validation."""

from .comparison import (
    CompareResponse,
    ComparisonResult,
    ComparisonSummary,
    ErrorResponse,
    FieldChange,
    RestoreRequest,
    RestoreResponse,
    SectionChange,
)
from .page import (
    PageCreate,
    PageResponse,
    PageState,
    PageUpdate,
    SectionState,
)
from .version import (
    Snapshot,
    VersionListResponse,
    VersionRef,
    VersionStats,
    VersionSummary,
)

__all__ = [
    # Comparison schemas
    "CompareResponse",
    "ComparisonResult",
    "ComparisonSummary",
    "ErrorResponse",
    "FieldChange",
    "RestoreRequest",
    "RestoreResponse",
    "SectionChange",
    # Page schemas
    "PageCreate",
    "PageResponse",
    "PageState",
    "PageUpdate",
    "SectionState",
    # Version schemas
    "Snapshot",
    "VersionListResponse",
    "VersionRef",
    "VersionStats",
    "VersionSummary",
]
