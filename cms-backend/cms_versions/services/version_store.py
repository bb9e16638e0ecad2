"""Version store for immutable page snapshots.

Persists snapshots in CmsPageVersions and numbers them per page.

Version numbers are assigned under two guards:
- a per-page asyncio.Lock, so writers inside one worker queue up instead
  of racing each other
- an optimistic UPDATE ... WHERE latest_version = expected on the page row
  plus the (page_id, version_number) unique constraint, so writers in
  different workers cannot both claim the same number

A lost optimistic race rolls the whole transaction back and retries with
a fresh read, up to settings.version_max_retries attempts. Every append
(sequence bump, snapshot row, activity log row) commits atomically or not
at all. Connection errors are not retried here; they propagate.
"""

import asyncio
import logging
import uuid
import weakref
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import settings
from ..database import async_session_maker
from ..exceptions import NotFoundError, PageExistsError, VersionConflictError
from ..models.activity_log import ActivityAction, ActivityLog
from ..models.page import Page
from ..models.page_version import PageVersion
from ..schemas.page import PageState
from ..schemas.version import Snapshot, VersionRef, VersionStats

logger = logging.getLogger(__name__)

INITIAL_VERSION_DESCRIPTION = "Initial version"


class _SequenceRace(Exception):
    """Another writer bumped the page's version sequence first."""


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC for TIMESTAMP columns."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_snapshot(row: PageVersion) -> Snapshot:
    """Convert a PageVersion row into an immutable Snapshot."""
    return Snapshot(
        id=row.id,
        page_id=row.page_id,
        version_number=row.version_number,
        change_description=row.change_description,
        created_by=row.created_by,
        created_at=row.created_at,
        is_published=row.is_published,
        published_at=row.published_at,
        tags=list(row.tags or []),
        state=PageState.from_payload(row.page_snapshot, row.sections_snapshot),
    )


class VersionStore:
    """
    Store for page snapshots.

    Opens one session and one transaction per operation from the given
    session factory, so a single store can be shared by concurrent
    requests.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_retries: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._max_retries = max_retries or settings.version_max_retries
        self._locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, page_id: UUID) -> asyncio.Lock:
        """Return the in-process lock serializing appends for a page."""
        lock = self._locks.get(page_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[page_id] = lock
        return lock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_page(
        self,
        page_key: str,
        state: PageState,
        created_by: Optional[str] = None,
        change_description: Optional[str] = None,
    ) -> tuple[Page, Snapshot]:
        """
        Create a page together with its version 1.

        Raises:
            PageExistsError: If a page with the same key already exists
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    page = Page(page_key=page_key, latest_version=1)
                    session.add(page)
                    await session.flush()
                    row = self._build_version(
                        session,
                        page_id=page.id,
                        version_number=1,
                        state=state,
                        created_by=created_by,
                        change_description=change_description or INITIAL_VERSION_DESCRIPTION,
                        tags=[],
                        action=ActivityAction.CREATE_VERSION,
                        activity_changes=None,
                    )
                    await session.flush()
                    snapshot = to_snapshot(row)
        except IntegrityError:
            raise PageExistsError(f"A page with key '{page_key}' already exists")

        logger.info(f"Page {page.id} ({page_key}) created with version 1")
        return page, snapshot

    async def create_snapshot(
        self,
        page_id: UUID,
        state: PageState,
        *,
        created_by: Optional[str] = None,
        change_description: Optional[str] = None,
        tags: Optional[list[str]] = None,
        expected_version: Optional[int] = None,
        action: str = ActivityAction.CREATE_VERSION,
        activity_changes: Optional[dict[str, Any]] = None,
    ) -> Snapshot:
        """
        Append a snapshot with the next version number of the page.

        Args:
            page_id: Page to append to
            state: Full page state to capture
            created_by: Identity of the author
            change_description: Free-text description
            tags: Tags stored on the snapshot
            expected_version: If given, the append only succeeds while the
                page's latest version number still equals it
            action: Activity log action recorded with the append
            activity_changes: Extra activity log change fields

        Returns:
            The created Snapshot

        Raises:
            NotFoundError: If the page does not exist
            VersionConflictError: If expected_version is stale, or the
                optimistic assignment kept losing races
        """
        async with self._lock_for(page_id):
            for attempt in range(1, self._max_retries + 1):
                try:
                    snapshot = await self._append(
                        page_id,
                        state,
                        created_by=created_by,
                        change_description=change_description,
                        tags=tags or [],
                        expected_version=expected_version,
                        action=action,
                        activity_changes=activity_changes,
                    )
                except (_SequenceRace, IntegrityError) as e:
                    logger.warning(
                        "Version number race on page %s (attempt %d/%d): %s",
                        page_id, attempt, self._max_retries, type(e).__name__,
                    )
                    continue

                logger.info(f"Version {snapshot.version_number} created for page {page_id}")
                return snapshot

        raise VersionConflictError(
            f"Could not assign a version number for page {page_id} "
            f"after {self._max_retries} attempts"
        )

    async def _append(
        self,
        page_id: UUID,
        state: PageState,
        *,
        created_by: Optional[str],
        change_description: Optional[str],
        tags: list[str],
        expected_version: Optional[int],
        action: str,
        activity_changes: Optional[dict[str, Any]],
    ) -> Snapshot:
        """Run one append attempt in its own transaction."""
        async with self._session_factory() as session:
            async with session.begin():
                current = await session.scalar(
                    select(Page.latest_version).where(Page.id == page_id)
                )
                if current is None:
                    raise NotFoundError(f"Page {page_id} not found")
                if expected_version is not None and current != expected_version:
                    raise VersionConflictError(
                        f"Page {page_id} has moved to version {current} "
                        f"(expected version {expected_version})"
                    )

                # Atomic bump with version check
                result = await session.execute(
                    update(Page)
                    .where(Page.id == page_id)
                    .where(Page.latest_version == current)
                    .values(latest_version=current + 1, updated_at=datetime.utcnow())
                )
                if result.rowcount == 0:
                    raise _SequenceRace()

                row = self._build_version(
                    session,
                    page_id=page_id,
                    version_number=current + 1,
                    state=state,
                    created_by=created_by,
                    change_description=change_description,
                    tags=tags,
                    action=action,
                    activity_changes=activity_changes,
                )
                await session.flush()
                return to_snapshot(row)

    def _build_version(
        self,
        session: AsyncSession,
        *,
        page_id: UUID,
        version_number: int,
        state: PageState,
        created_by: Optional[str],
        change_description: Optional[str],
        tags: list[str],
        action: str,
        activity_changes: Optional[dict[str, Any]],
    ) -> PageVersion:
        """Add a PageVersion row and its activity log entry to the session."""
        sections = state.sections_payload()
        row = PageVersion(
            id=uuid.uuid4(),
            page_id=page_id,
            version_number=version_number,
            page_snapshot=state.page_payload(),
            sections_snapshot=sections,
            change_description=change_description,
            created_by=created_by,
            created_at=datetime.utcnow(),
            is_published=state.status == "published",
            published_at=_naive_utc(state.published_at),
            tags=list(tags),
        )
        session.add(row)
        session.add(
            ActivityLog(
                user_id=created_by,
                action=action,
                entity_type="CmsPage",
                entity_id=page_id,
                changes={
                    "versionNumber": version_number,
                    "description": change_description,
                    **(activity_changes or {}),
                },
                details={
                    "versionId": str(row.id),
                    "totalSections": len(sections),
                },
            )
        )
        return row

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_page(self, page_id: UUID) -> Page:
        """Fetch a page row or raise NotFoundError."""
        async with self._session_factory() as session:
            page = await session.get(Page, page_id)
        if page is None:
            raise NotFoundError(f"Page {page_id} not found")
        return page

    async def list_snapshots(self, page_id: UUID, limit: Optional[int] = None) -> list[Snapshot]:
        """List snapshots of a page, newest first."""
        query = (
            select(PageVersion)
            .where(PageVersion.page_id == page_id)
            .order_by(PageVersion.version_number.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [to_snapshot(row) for row in rows]

    async def get_snapshot(self, snapshot_id: UUID) -> Snapshot:
        """Fetch one snapshot or raise NotFoundError."""
        async with self._session_factory() as session:
            row = await session.get(PageVersion, snapshot_id)
        if row is None:
            raise NotFoundError(f"Snapshot {snapshot_id} not found")
        return to_snapshot(row)

    async def get_latest(self, page_id: UUID) -> Snapshot:
        """Fetch the latest snapshot of a page or raise NotFoundError."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(PageVersion)
                .where(PageVersion.page_id == page_id)
                .order_by(PageVersion.version_number.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Page {page_id} has no versions")
        return to_snapshot(row)

    async def get_latest_published(self, page_id: UUID) -> Snapshot:
        """Fetch the newest published snapshot of a page or raise NotFoundError."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(PageVersion)
                .where(PageVersion.page_id == page_id)
                .where(PageVersion.is_published.is_(True))
                .order_by(PageVersion.version_number.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Page {page_id} has no published version")
        return to_snapshot(row)

    async def get_stats(self, page_id: UUID) -> VersionStats:
        """Version statistics for a page."""
        await self.get_page(page_id)

        async with self._session_factory() as session:
            total, latest_number = (
                await session.execute(
                    select(
                        func.count(PageVersion.id),
                        func.max(PageVersion.version_number),
                    ).where(PageVersion.page_id == page_id)
                )
            ).one()
            published = await session.scalar(
                select(func.count(PageVersion.id))
                .where(PageVersion.page_id == page_id)
                .where(PageVersion.is_published.is_(True))
            )
            latest_row = (
                await session.execute(
                    select(
                        PageVersion.id,
                        PageVersion.version_number,
                        PageVersion.created_at,
                        PageVersion.created_by,
                    )
                    .where(PageVersion.page_id == page_id)
                    .order_by(PageVersion.version_number.desc())
                    .limit(1)
                )
            ).one_or_none()

        latest_ref = None
        if latest_row is not None:
            latest_ref = VersionRef(
                id=latest_row.id,
                version_number=latest_row.version_number,
                created_at=latest_row.created_at,
                created_by=latest_row.created_by,
            )

        return VersionStats(
            total_versions=total or 0,
            latest_version_number=latest_number or 0,
            published_versions=published or 0,
            latest_version=latest_ref,
        )


# Global store instance bound to the application's session factory
version_store = VersionStore(async_session_maker)


def get_version_store() -> VersionStore:
    """
    FastAPI dependency for getting the version store instance.

    Returns:
        Version store instance
    """
    return version_store
