"""Pydantic schemas for snapshot comparison and restore."""

from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import Field

from .page import CamelModel
from .version import VersionRef

SectionChangeType = Literal["added", "removed", "modified"]


class FieldChange(CamelModel):
    """Old and new value of one field. Absent values are reported as null."""

    old: Any = None
    new: Any = None


class SectionChange(CamelModel):
    """
    Change to one section, matched across snapshots by section key.

    Added and removed entries carry the full section; modified entries
    carry only the fields that differ.
    """

    type: SectionChangeType
    section_key: str
    section: Optional[dict[str, Any]] = None
    changes: Optional[dict[str, FieldChange]] = None


class ComparisonSummary(CamelModel):
    """Counts describing a comparison."""

    fields_changed: list[str] = Field(default_factory=list)
    sections_added: int = 0
    sections_removed: int = 0
    sections_modified: int = 0
    sections_reordered: bool = False
    metadata_changes: int = 0
    has_content_changes: bool = False
    has_structural_changes: bool = False
    total_changes: int = 0


class ComparisonResult(CamelModel):
    """Structural delta between two snapshots of the same page."""

    old_snapshot_id: UUID
    new_snapshot_id: UUID
    page_changes: dict[str, FieldChange] = Field(default_factory=dict)
    section_changes: list[SectionChange] = Field(default_factory=list)
    metadata_changes: dict[str, FieldChange] = Field(default_factory=dict)
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)

    @property
    def is_empty(self) -> bool:
        """True when page state is identical; metadata changes are ignored."""
        return not self.page_changes and not self.section_changes


class CompareResponse(CamelModel):
    """Response for GET /api/versions/compare."""

    version1: VersionRef
    version2: VersionRef
    page_changes: dict[str, FieldChange]
    section_changes: list[SectionChange]
    metadata_changes: dict[str, FieldChange]
    summary: ComparisonSummary


class RestoreRequest(CamelModel):
    """Body for POST /api/versions/restore."""

    document_id: UUID = Field(..., description="Page the target snapshot belongs to")
    target_snapshot_id: UUID = Field(..., description="Snapshot to restore")
    restored_by: Optional[str] = Field(None, max_length=255)
    change_description: Optional[str] = None


class RestoreResponse(CamelModel):
    """Result of a successful restore."""

    new_version_id: UUID
    new_version_number: int
    message: str


class ErrorResponse(CamelModel):
    """Error body for domain errors."""

    error: str
    message: str
