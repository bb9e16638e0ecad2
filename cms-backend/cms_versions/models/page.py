"""CmsPage SQLAlchemy model.

A page is the versioned entity. Its content lives entirely in its
snapshots (CmsPageVersions); the page row only anchors the snapshots and
holds the per-page version sequence used to number them.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, Integer, String, Uuid
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .page_version import PageVersion


class Page(Base):
    """
    Page model anchoring a version history.

    Attributes:
        id: Unique identifier (UUID)
        page_key: Stable human-readable key (unique)
        latest_version: Highest version number assigned so far. Bumped with
            an optimistic UPDATE ... WHERE latest_version = expected, so two
            writers can never claim the same number.
        created_at: Timestamp when the page was created
        updated_at: Timestamp of the most recent snapshot append
    """

    __tablename__ = "CmsPages"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    page_key = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    # Version sequence
    latest_version = Column(
        Integer,
        nullable=False,
        default=0,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    versions = relationship(
        "PageVersion",
        back_populates="page",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    def __repr__(self) -> str:
        """String representation of Page."""
        return f"<Page(id={self.id}, key={self.page_key}, latest_version={self.latest_version})>"
