"""Pydantic schemas for page snapshots (versions)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .page import CamelModel, PageState


class VersionRef(CamelModel):
    """Minimal reference to a snapshot."""

    id: UUID
    version_number: int
    created_at: datetime
    created_by: Optional[str] = None


class VersionSummary(VersionRef):
    """Snapshot list item (no state payload)."""

    change_description: Optional[str] = None
    is_published: bool = False
    published_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)


class Snapshot(VersionSummary):
    """
    Immutable snapshot of a page's full state.

    Instances are frozen; a changed page is always a new snapshot.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    page_id: UUID
    state: PageState

    def to_ref(self) -> VersionRef:
        return VersionRef(
            id=self.id,
            version_number=self.version_number,
            created_at=self.created_at,
            created_by=self.created_by,
        )

    def to_summary(self) -> VersionSummary:
        return VersionSummary(
            id=self.id,
            version_number=self.version_number,
            created_at=self.created_at,
            created_by=self.created_by,
            change_description=self.change_description,
            is_published=self.is_published,
            published_at=self.published_at,
            tags=list(self.tags),
        )


class VersionListResponse(CamelModel):
    """Versions of a page, newest first."""

    page_id: UUID
    items: list[VersionSummary]


class VersionStats(CamelModel):
    """Version statistics for a page."""

    total_versions: int
    latest_version_number: int
    published_versions: int
    latest_version: Optional[VersionRef] = None
