"""Typed failures surfaced by snapshot capture, storage, and comparison."""

from __future__ import annotations


class DirdiffError(Exception):
    """Base error carrying a stable code plus a user-facing hint."""

    code = "DIRDIFF_ERROR"

    def __init__(self, reason: str, hint: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint

    def to_dict(self) -> dict[str, str]:
        """Return error envelope payload."""
        return {"code": self.code, "message": self.reason, "hint": self.hint}


class CaptureError(DirdiffError):
    """Raised when a directory cannot be captured as a snapshot."""

    code = "CAPTURE_FAILED"


class ParseError(DirdiffError):
    """Raised when a persisted snapshot line is malformed."""

    code = "PARSE_FAILED"

    def __init__(self, reason: str, hint: str = "", line_number: int | None = None) -> None:
        super().__init__(reason, hint)
        self.line_number = line_number


class PreconditionError(DirdiffError):
    """Raised when a comparison lacks the snapshots it needs."""

    code = "NOT_ENOUGH_REVISIONS"


class AmbiguousMatchError(DirdiffError):
    """Raised by the strict tie-break when a record has several partners."""

    code = "AMBIGUOUS_MATCH"


class RecordValidationError(DirdiffError):
    """Raised when a record is malformed or collides within its snapshot."""

    code = "INVALID_RECORD"


class SnapshotCollisionError(DirdiffError):
    """Raised when a new snapshot is not newer than the stored ones."""

    code = "SNAPSHOT_COLLISION"


class NotImplementedFeatureError(DirdiffError):
    """Raised for declared commands that have no behavior."""

    code = "NOT_IMPLEMENTED"


class DataDirConflictError(DirdiffError):
    """Raised when a data directory already tracks a different root."""

    code = "DATA_DIR_CONFLICT"
