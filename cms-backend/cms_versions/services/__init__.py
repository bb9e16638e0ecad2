"""Business logic services."""

from .diff_service import (
    compare_snapshots,
    diff_fields,
    diff_metadata,
    diff_sections,
    sections_reordered,
    summarize,
    values_equal,
)
from .restore_service import (
    RestoreService,
    restore_tags,
)
from .version_store import (
    VersionStore,
    get_version_store,
    to_snapshot,
    version_store,
)

__all__ = [
    # Diff service
    "compare_snapshots",
    "diff_fields",
    "diff_metadata",
    "diff_sections",
    "sections_reordered",
    "summarize",
    "values_equal",
    # Restore service
    "RestoreService",
    "restore_tags",
    # Version store
    "VersionStore",
    "get_version_store",
    "to_snapshot",
    "version_store",
]
