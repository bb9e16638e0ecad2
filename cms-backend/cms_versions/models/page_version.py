"""CmsPageVersion SQLAlchemy model - immutable page snapshots."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .page import Page

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class PageVersion(Base):
    """
    Immutable snapshot of a page's full state at a point in time.

    Rows are only ever inserted. Corrections and restores are new rows
    with the next version number.

    Attributes:
        id: Unique identifier (UUID)
        page_id: FK to the owning page
        version_number: Per-page sequence number, starting at 1
        page_snapshot: Page-level fields (JSON object, camelCase keys)
        sections_snapshot: Ordered list of section objects
        change_description: Free-text description of the change
        created_by: Identity of the author (opaque string)
        created_at: Timestamp when the snapshot was created
        is_published: Whether the captured state was published
        published_at: Publication timestamp copied from the state
        tags: Free-form tag list (e.g. ["restore", "from-v3"])
    """

    __tablename__ = "CmsPageVersions"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Owning page
    page_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("CmsPages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    version_number = Column(
        Integer,
        nullable=False,
    )

    # Snapshot content
    page_snapshot = Column(
        JSONType,
        nullable=False,
    )

    sections_snapshot = Column(
        JSONType,
        nullable=False,
    )

    # Snapshot metadata
    change_description = Column(
        Text,
        nullable=True,
    )

    is_published = Column(
        Boolean,
        nullable=False,
        default=False,
    )

    published_at = Column(
        DateTime,
        nullable=True,
    )

    tags = Column(
        JSONType,
        nullable=False,
        default=list,
    )

    # Audit
    created_by = Column(
        String(255),
        nullable=True,
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("page_id", "version_number", name="uq_cms_page_versions_page_number"),
        Index("ix_cms_page_versions_page_published", "page_id", "is_published"),
    )

    # Relationships
    page = relationship(
        "Page",
        back_populates="versions",
        lazy="noload",
    )

    def __repr__(self) -> str:
        """String representation of PageVersion."""
        return f"<PageVersion(id={self.id}, page_id={self.page_id}, version={self.version_number})>"
