"""
Snapshot diff service for computing structural deltas between page versions.

This module provides pure functions: no database access, no clock, no
randomness. The same two snapshots always produce the same result, which
keeps comparisons safe to cache and to assert on byte-for-byte in tests.

Comparison rules:
1. Page-level fields are compared over the union of keys of both snapshots
   (sections excluded). A key missing on one side differs from every
   value on the other side, null included, and is reported as null.
2. Values are compared by deep structural equality of their JSON form:
   object key order is irrelevant, types are not (true != 1).
3. Sections are matched by section key, never by position:
   - key only in the newer snapshot  -> "added" (full section)
   - key only in the older snapshot  -> "removed" (full section)
   - key in both with any field diff -> "modified" (changed fields only)
   - key in both with no diff        -> omitted
4. Section changes are ordered by the newer snapshot's section order,
   followed by removed sections in the older snapshot's order. Field
   changes are keyed in sorted order.
5. Metadata (author and change description) is diffed separately and
   never counts as a content change.
"""

import json
from typing import Any, Iterable, Optional

from ..exceptions import InvalidComparisonError
from ..schemas.comparison import (
    ComparisonResult,
    ComparisonSummary,
    FieldChange,
    SectionChange,
)
from ..schemas.version import Snapshot

SECTION_KEY_FIELD = "sectionKey"
METADATA_FIELDS = ("createdBy", "changeDescription")

_MISSING = object()


def _canonical(value: Any) -> str:
    """Canonical JSON text of a value, used for structural equality."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def values_equal(a: Any, b: Any) -> bool:
    """
    Check deep structural equality of two JSON values.

    Plain ``==`` is not enough: Python treats ``True == 1`` and
    ``1 == 1.0`` as equal, JSON does not.
    """
    return _canonical(a) == _canonical(b)


def diff_fields(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude: Iterable[str] = (),
) -> dict[str, FieldChange]:
    """
    Compare two flat field mappings.

    Args:
        old: Fields of the older side
        new: Fields of the newer side
        exclude: Keys to skip (identity fields)

    Returns:
        Mapping of changed field name to its old/new values, in sorted key order
    """
    skipped = set(exclude)
    changes: dict[str, FieldChange] = {}
    for key in sorted((set(old) | set(new)) - skipped):
        old_value = old.get(key, _MISSING)
        new_value = new.get(key, _MISSING)
        present = old_value is not _MISSING and new_value is not _MISSING
        if present and values_equal(old_value, new_value):
            continue
        changes[key] = FieldChange(
            old=None if old_value is _MISSING else old_value,
            new=None if new_value is _MISSING else new_value,
        )
    return changes


def diff_sections(
    old_sections: list[dict[str, Any]],
    new_sections: list[dict[str, Any]],
) -> list[SectionChange]:
    """
    Compare two section lists by section key.

    Args:
        old_sections: Sections of the older snapshot, in page order
        new_sections: Sections of the newer snapshot, in page order

    Returns:
        Added and modified sections in the newer order, then removed
        sections in the older order
    """
    old_by_key = {section[SECTION_KEY_FIELD]: section for section in old_sections}
    new_keys = {section[SECTION_KEY_FIELD] for section in new_sections}

    changes: list[SectionChange] = []
    for section in new_sections:
        key = section[SECTION_KEY_FIELD]
        previous = old_by_key.get(key)
        if previous is None:
            changes.append(SectionChange(type="added", section_key=key, section=section))
            continue

        field_changes = diff_fields(previous, section, exclude=(SECTION_KEY_FIELD,))
        if field_changes:
            changes.append(
                SectionChange(type="modified", section_key=key, changes=field_changes)
            )

    for section in old_sections:
        key = section[SECTION_KEY_FIELD]
        if key not in new_keys:
            changes.append(SectionChange(type="removed", section_key=key, section=section))

    return changes


def sections_reordered(
    old_sections: list[dict[str, Any]],
    new_sections: list[dict[str, Any]],
) -> bool:
    """Check whether the sections present in both lists changed relative order."""
    old_keys = [section[SECTION_KEY_FIELD] for section in old_sections]
    new_keys = [section[SECTION_KEY_FIELD] for section in new_sections]
    common = set(old_keys) & set(new_keys)
    return [k for k in old_keys if k in common] != [k for k in new_keys if k in common]


def diff_metadata(older: Snapshot, newer: Snapshot) -> dict[str, FieldChange]:
    """Compare the author and change description of two snapshots."""
    old = older.model_dump(mode="json", by_alias=True, include={"created_by", "change_description"})
    new = newer.model_dump(mode="json", by_alias=True, include={"created_by", "change_description"})
    return {
        key: FieldChange(old=old[key], new=new[key])
        for key in METADATA_FIELDS
        if old[key] != new[key]
    }


def summarize(
    page_changes: dict[str, FieldChange],
    section_changes: list[SectionChange],
    reordered: bool,
    metadata_changes: Optional[dict[str, FieldChange]] = None,
) -> ComparisonSummary:
    """Build the summary counts for a comparison."""
    added = sum(1 for change in section_changes if change.type == "added")
    removed = sum(1 for change in section_changes if change.type == "removed")
    modified = sum(1 for change in section_changes if change.type == "modified")
    metadata = len(metadata_changes or {})

    return ComparisonSummary(
        fields_changed=list(page_changes),
        sections_added=added,
        sections_removed=removed,
        sections_modified=modified,
        sections_reordered=reordered,
        metadata_changes=metadata,
        has_content_changes=bool(page_changes) or bool(section_changes),
        has_structural_changes=added > 0 or removed > 0 or reordered,
        total_changes=(
            len(page_changes) + added + removed + modified + metadata + (1 if reordered else 0)
        ),
    )


def compare_snapshots(older: Snapshot, newer: Snapshot) -> ComparisonResult:
    """
    Compute the structural delta between two snapshots of the same page.

    Args:
        older: Snapshot reported on the "old" side
        newer: Snapshot reported on the "new" side

    Returns:
        ComparisonResult with page, section and metadata changes plus summary

    Raises:
        InvalidComparisonError: If the snapshots belong to different pages
    """
    if older.page_id != newer.page_id:
        raise InvalidComparisonError(
            f"Cannot compare snapshot {older.id} of page {older.page_id} "
            f"with snapshot {newer.id} of page {newer.page_id}"
        )

    old_sections = older.state.sections_payload()
    new_sections = newer.state.sections_payload()

    page_changes = diff_fields(older.state.page_payload(), newer.state.page_payload())
    section_changes = diff_sections(old_sections, new_sections)
    reordered = sections_reordered(old_sections, new_sections)
    metadata_changes = diff_metadata(older, newer)

    return ComparisonResult(
        old_snapshot_id=older.id,
        new_snapshot_id=newer.id,
        page_changes=page_changes,
        section_changes=section_changes,
        metadata_changes=metadata_changes,
        summary=summarize(page_changes, section_changes, reordered, metadata_changes),
    )
