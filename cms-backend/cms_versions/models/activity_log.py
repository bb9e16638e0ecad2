"""CmsActivityLog SQLAlchemy model for version history audit entries."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from ..database import Base
from .page_version import JSONType


class ActivityAction:
    """Actions recorded in the activity log."""

    CREATE_VERSION = "CREATE_VERSION"
    RESTORE_VERSION = "RESTORE_VERSION"


class ActivityLog(Base):
    """
    Audit row written in the same transaction as each snapshot append.

    Attributes:
        id: Unique identifier (UUID)
        user_id: Identity of the actor (opaque string)
        action: One of ActivityAction
        entity_type: Type of the affected entity ("CmsPage")
        entity_id: UUID of the affected entity
        changes: What changed (version number, description, restore source)
        details: Extra context (version id, section count)
        created_at: Timestamp of the entry
    """

    __tablename__ = "CmsActivityLog"
    __allow_unmapped__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    user_id = Column(
        String(255),
        nullable=True,
    )

    action = Column(
        String(50),
        nullable=False,
        index=True,
    )

    entity_type = Column(
        String(50),
        nullable=False,
    )

    entity_id = Column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    changes = Column(
        JSONType,
        nullable=True,
    )

    details = Column(
        JSONType,
        nullable=True,
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of ActivityLog."""
        return f"<ActivityLog(action={self.action}, entity_id={self.entity_id})>"
