"""Version comparison and restore API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ..exceptions import NotFoundError
from ..schemas.comparison import (
    CompareResponse,
    ErrorResponse,
    RestoreRequest,
    RestoreResponse,
)
from ..schemas.version import Snapshot
from ..services.diff_service import compare_snapshots
from ..services.restore_service import RestoreService
from ..services.version_store import VersionStore, get_version_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/versions", tags=["Versions"])

_error_responses = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _compare_response(older: Snapshot, newer: Snapshot) -> CompareResponse:
    result = compare_snapshots(older, newer)
    return CompareResponse(
        version1=older.to_ref(),
        version2=newer.to_ref(),
        page_changes=result.page_changes,
        section_changes=result.section_changes,
        metadata_changes=result.metadata_changes,
        summary=result.summary,
    )


# ============================================================================
# Compare and restore (MUST be before /{snapshot_id} to avoid path matching)
# ============================================================================


@router.get("/compare", response_model=CompareResponse, responses=_error_responses)
async def compare_versions(
    document_id: UUID = Query(..., alias="documentId", description="Page ID"),
    v1: UUID = Query(..., description="Older snapshot ID"),
    v2: UUID = Query(..., description="Newer snapshot ID"),
    store: VersionStore = Depends(get_version_store),
) -> CompareResponse:
    """
    Compare two snapshots of a page.

    Returns 400 if the snapshots belong to different pages and 404 if
    either snapshot is missing or the pair does not belong to documentId.
    """
    older = await store.get_snapshot(v1)
    newer = await store.get_snapshot(v2)

    # Raises InvalidComparisonError for snapshots of different pages
    response = _compare_response(older, newer)

    if older.page_id != document_id:
        raise NotFoundError(
            f"Snapshots {v1} and {v2} do not belong to page {document_id}"
        )

    return response


@router.get("/compare-published", response_model=CompareResponse, responses=_error_responses)
async def compare_latest_with_published(
    document_id: UUID = Query(..., alias="documentId", description="Page ID"),
    store: VersionStore = Depends(get_version_store),
) -> CompareResponse:
    """
    Compare the newest published snapshot (version1) with the latest one (version2).

    Returns 404 if the page has never been published. When the latest
    snapshot is the published one the diff is empty.
    """
    published = await store.get_latest_published(document_id)
    latest = await store.get_latest(document_id)
    return _compare_response(published, latest)


@router.post("/restore", response_model=RestoreResponse, responses=_error_responses)
async def restore_version(
    body: RestoreRequest,
    store: VersionStore = Depends(get_version_store),
) -> RestoreResponse:
    """
    Restore a page to a snapshot by appending a copy of it as a new version.

    Returns 409 with error "no_op" if the snapshot is already the latest.
    """
    restored = await RestoreService(store).restore(
        body.document_id,
        body.target_snapshot_id,
        restored_by=body.restored_by,
        change_description=body.change_description,
    )
    return RestoreResponse(
        new_version_id=restored.id,
        new_version_number=restored.version_number,
        message=restored.change_description or f"Restored as version {restored.version_number}",
    )


# ============================================================================
# Single snapshot
# ============================================================================


@router.get("/{snapshot_id}", response_model=Snapshot, responses={404: {"model": ErrorResponse}})
async def get_version(
    snapshot_id: UUID,
    store: VersionStore = Depends(get_version_store),
) -> Snapshot:
    """Get one snapshot with its full page state."""
    return await store.get_snapshot(snapshot_id)
