"""Domain errors raised by the version history services.

Each error carries a machine-readable ``error_code`` and the HTTP status the
API layer should answer with. Messages name the page and snapshot ids
involved so callers can log and display them without seeing storage details.
"""

from fastapi import status


class VersionHistoryError(Exception):
    """Base class for version history errors."""

    error_code = "version_history_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error_code, "message": self.message}


class NotFoundError(VersionHistoryError):
    """A referenced page or snapshot does not exist."""

    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidComparisonError(VersionHistoryError):
    """The two snapshots being compared belong to different pages."""

    error_code = "invalid_comparison"
    status_code = status.HTTP_400_BAD_REQUEST


class NoOpError(VersionHistoryError):
    """A restore targeted the snapshot that is already the latest."""

    error_code = "no_op"
    status_code = status.HTTP_409_CONFLICT


class VersionConflictError(VersionHistoryError):
    """The page's version sequence moved while a snapshot was being appended."""

    error_code = "version_conflict"
    status_code = status.HTTP_409_CONFLICT


class PageExistsError(VersionHistoryError):
    """A page with the requested key already exists."""

    error_code = "page_exists"
    status_code = status.HTTP_409_CONFLICT
