"""Page API endpoints.

Provides endpoints for creating and editing pages and for browsing their
version history. Every create and edit appends an immutable snapshot; the
current page is always the latest snapshot.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ..config import settings
from ..schemas.page import PageCreate, PageResponse, PageUpdate
from ..schemas.version import Snapshot, VersionListResponse, VersionStats
from ..services.version_store import VersionStore, get_version_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pages", tags=["Pages"])


def _page_response(page_id: UUID, page_key: str, snapshot: Snapshot) -> PageResponse:
    return PageResponse(
        id=page_id,
        page_key=page_key,
        version_id=snapshot.id,
        version_number=snapshot.version_number,
        state=snapshot.state,
        updated_at=snapshot.created_at,
    )


@router.post("", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
async def create_page(
    body: PageCreate,
    store: VersionStore = Depends(get_version_store),
) -> PageResponse:
    """
    Create a page and its version 1.

    Returns 409 if a page with the same key already exists.
    """
    page, snapshot = await store.create_page(
        body.page_key,
        body.state,
        created_by=body.created_by,
        change_description=body.change_description,
    )
    return _page_response(page.id, page.page_key, snapshot)


@router.get("/{page_id}", response_model=PageResponse)
async def get_page(
    page_id: UUID,
    store: VersionStore = Depends(get_version_store),
) -> PageResponse:
    """Get the current state of a page (its latest snapshot)."""
    page = await store.get_page(page_id)
    snapshot = await store.get_latest(page_id)
    return _page_response(page.id, page.page_key, snapshot)


@router.put("/{page_id}", response_model=PageResponse)
async def update_page(
    page_id: UUID,
    body: PageUpdate,
    store: VersionStore = Depends(get_version_store),
) -> PageResponse:
    """
    Edit a page by appending a snapshot of the new state.

    If expectedVersion is sent and the page has moved past it, a 409
    Conflict is returned and nothing is written.
    """
    page = await store.get_page(page_id)
    snapshot = await store.create_snapshot(
        page_id,
        body.state,
        created_by=body.changed_by,
        change_description=body.change_description,
        tags=body.tags,
        expected_version=body.expected_version,
    )
    return _page_response(page.id, page.page_key, snapshot)


# ============================================================================
# Version history endpoints
# ============================================================================


@router.get("/{page_id}/versions", response_model=VersionListResponse)
async def list_page_versions(
    page_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Max versions to return"),
    store: VersionStore = Depends(get_version_store),
) -> VersionListResponse:
    """List a page's versions, newest first."""
    await store.get_page(page_id)
    snapshots = await store.list_snapshots(page_id, limit=limit or settings.version_list_limit)
    return VersionListResponse(
        page_id=page_id,
        items=[snapshot.to_summary() for snapshot in snapshots],
    )


@router.get("/{page_id}/versions/stats", response_model=VersionStats)
async def get_page_version_stats(
    page_id: UUID,
    store: VersionStore = Depends(get_version_store),
) -> VersionStats:
    """Version statistics for a page."""
    return await store.get_stats(page_id)
