"""Mutable staging collection consumed by the classifier phases."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from dirdiff.snapshot.models import FileRecord, SnapshotStore, validate_record


class Side(str, Enum):
    """Which of the two compared snapshots a record came from."""

    PREVIOUS = "previous"
    LATEST = "latest"


@dataclass(slots=True, frozen=True)
class WorkingEntry:
    """A record tagged with the side it was seeded from."""

    side: Side
    record: FileRecord


EntryPredicate = Callable[[WorkingEntry], bool]


class WorkingSet:
    """Records not yet resolved by a comparison.

    The set only ever shrinks after seeding. It belongs to a single
    classification run and must not be shared between comparisons.
    """

    def __init__(self, entries: Iterable[WorkingEntry]) -> None:
        self._entries: list[WorkingEntry] = list(entries)

    @classmethod
    def seed(cls, store: SnapshotStore, latest: int, previous: int) -> WorkingSet:
        """Seed with the records of the ``latest`` and ``previous`` snapshots."""
        entries: list[WorkingEntry] = []
        for record in store.records:
            if record.snapshot_id == latest:
                entries.append(WorkingEntry(side=Side.LATEST, record=validate_record(record)))
            elif record.snapshot_id == previous:
                entries.append(WorkingEntry(side=Side.PREVIOUS, record=validate_record(record)))
        return cls(entries)

    @classmethod
    def from_sides(
        cls,
        previous: Iterable[FileRecord],
        latest: Iterable[FileRecord],
    ) -> WorkingSet:
        """Seed from two explicit record collections."""
        entries = [
            WorkingEntry(side=Side.PREVIOUS, record=validate_record(record)) for record in previous
        ]
        entries.extend(
            WorkingEntry(side=Side.LATEST, record=validate_record(record)) for record in latest
        )
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def remove_matching(self, predicate: EntryPredicate) -> list[WorkingEntry]:
        """Extract and return every entry satisfying ``predicate``, in seed order."""
        removed: list[WorkingEntry] = []
        kept: list[WorkingEntry] = []
        for entry in self._entries:
            if predicate(entry):
                removed.append(entry)
            else:
                kept.append(entry)
        self._entries = kept
        return removed

    def remaining(self) -> tuple[WorkingEntry, ...]:
        return tuple(self._entries)

    def remaining_on(self, side: Side) -> tuple[FileRecord, ...]:
        """Return remaining records of one side, in seed order."""
        return tuple(entry.record for entry in self._entries if entry.side is side)
