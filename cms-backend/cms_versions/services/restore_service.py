"""Restore service: make an old snapshot the page's current state.

Restoring never rewinds. The target snapshot's state is appended as a new
snapshot with the next version number, and every earlier snapshot stays
exactly as it was. Restoring the snapshot that is already the latest is
rejected with NoOpError rather than creating a duplicate.
"""

import logging
from typing import Optional
from uuid import UUID

from ..config import settings
from ..exceptions import NoOpError, NotFoundError
from ..models.activity_log import ActivityAction
from ..schemas.version import Snapshot
from .version_store import VersionStore

logger = logging.getLogger(__name__)

RESTORE_TAG = "restore"


def restore_tags(version_number: int) -> list[str]:
    """Tags stored on a snapshot created by restoring the given version."""
    return [RESTORE_TAG, f"from-v{version_number}"]


class RestoreService:
    """Appends restored snapshots through a VersionStore."""

    def __init__(self, store: VersionStore):
        self.store = store

    async def restore(
        self,
        page_id: UUID,
        target_snapshot_id: UUID,
        restored_by: Optional[str] = None,
        change_description: Optional[str] = None,
    ) -> Snapshot:
        """
        Restore a page to one of its snapshots.

        Args:
            page_id: Page being restored
            target_snapshot_id: Snapshot whose state becomes current
            restored_by: Identity of the caller (defaults to settings.system_actor)
            change_description: Overrides "Restored to version N"

        Returns:
            The newly appended Snapshot

        Raises:
            NotFoundError: If the target does not exist or belongs to another page
            NoOpError: If the target is already the latest snapshot
            VersionConflictError: If another snapshot was appended mid-restore
        """
        try:
            target = await self.store.get_snapshot(target_snapshot_id)
        except NotFoundError:
            raise NotFoundError(
                f"Snapshot {target_snapshot_id} not found for page {page_id}"
            )
        if target.page_id != page_id:
            raise NotFoundError(
                f"Snapshot {target_snapshot_id} does not belong to page {page_id}"
            )

        latest = await self.store.get_latest(page_id)
        if latest.id == target.id:
            raise NoOpError(
                f"Snapshot {target_snapshot_id} is already the latest version "
                f"(v{target.version_number}) of page {page_id}"
            )

        restored = await self.store.create_snapshot(
            page_id,
            target.state,
            created_by=restored_by or settings.system_actor,
            change_description=change_description
            or f"Restored to version {target.version_number}",
            tags=restore_tags(target.version_number),
            expected_version=latest.version_number,
            action=ActivityAction.RESTORE_VERSION,
            activity_changes={
                "restoredFromVersion": target.version_number,
                "restoredVersionId": str(target.id),
            },
        )

        logger.info(
            f"Page {page_id} restored to version {target.version_number} "
            f"as version {restored.version_number}"
        )
        return restored
