"""Typed models for captured snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from dirdiff.errors import RecordValidationError

ROOT_PATH = "."


@dataclass(slots=True, frozen=True)
class FileRecord:
    """One file observed by one snapshot."""

    hash: str
    name: str
    path: str
    snapshot_id: int


def validate_record(record: FileRecord) -> FileRecord:
    """Reject records with missing text fields or a bad snapshot id."""
    for field_name in ("hash", "name", "path"):
        value = getattr(record, field_name)
        if not isinstance(value, str) or not value:
            raise RecordValidationError(
                reason=f"Record field '{field_name}' must be a non-empty string.",
                hint=f"Offending record: {record!r}",
            )
    snapshot_id = record.snapshot_id
    if isinstance(snapshot_id, bool) or not isinstance(snapshot_id, int):
        raise RecordValidationError(
            reason="Record field 'snapshot_id' must be an integer millisecond timestamp.",
            hint=f"Offending record: {record!r}",
        )
    if snapshot_id < 0:
        raise RecordValidationError(
            reason="Record field 'snapshot_id' must not be negative.",
            hint=f"Offending record: {record!r}",
        )
    return record


@dataclass(slots=True, frozen=True)
class SnapshotStore:
    """Validated, immutable collection of records across snapshots."""

    records: tuple[FileRecord, ...]

    @classmethod
    def from_records(cls, records: Iterable[FileRecord]) -> SnapshotStore:
        """Validate records and reject duplicate entries inside one snapshot."""
        collected: list[FileRecord] = []
        seen: set[tuple[int, str, str]] = set()
        for record in records:
            validate_record(record)
            key = (record.snapshot_id, record.path, record.name)
            if key in seen:
                raise RecordValidationError(
                    reason=(
                        f"Snapshot {record.snapshot_id} lists '{record.path}/{record.name}' "
                        "more than once."
                    ),
                    hint=(
                        "Two captures were probably stamped with the same millisecond; "
                        "remove the duplicated snapshot lines from the history file."
                    ),
                )
            seen.add(key)
            collected.append(record)
        return cls(records=tuple(collected))

    def __len__(self) -> int:
        return len(self.records)

    def snapshot_ids(self) -> tuple[int, ...]:
        """Return distinct snapshot ids, newest first."""
        return tuple(sorted({record.snapshot_id for record in self.records}, reverse=True))

    def snapshot(self, snapshot_id: int) -> tuple[FileRecord, ...]:
        """Return the records of one snapshot in stored order."""
        return tuple(record for record in self.records if record.snapshot_id == snapshot_id)

    def latest(self) -> SnapshotStore:
        """Return a store holding only the newest snapshot."""
        ids = self.snapshot_ids()
        if not ids:
            return SnapshotStore(records=())
        return SnapshotStore(records=self.snapshot(ids[0]))


def sort_key(record: FileRecord) -> tuple[str, str, str]:
    """Stable ordering used wherever records must be visited deterministically."""
    return (record.path, record.name, record.hash)
