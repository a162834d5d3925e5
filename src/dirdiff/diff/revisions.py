"""Ordered snapshot identifiers and selection of the pair to compare."""

from __future__ import annotations

from dataclasses import dataclass

from dirdiff.errors import PreconditionError
from dirdiff.snapshot.models import SnapshotStore


@dataclass(slots=True, frozen=True)
class RevisionIndex:
    """Distinct snapshot ids of a store, newest first."""

    revisions: tuple[int, ...]

    @classmethod
    def from_store(cls, store: SnapshotStore) -> RevisionIndex:
        return cls(revisions=store.snapshot_ids())

    def __len__(self) -> int:
        return len(self.revisions)

    @property
    def latest(self) -> int:
        return self.select_pair()[0]

    @property
    def previous(self) -> int:
        return self.select_pair()[1]

    def select_pair(self) -> tuple[int, int]:
        """Return (latest, previous); fewer than two revisions cannot be compared."""
        if len(self.revisions) < 2:
            raise PreconditionError(
                reason=(
                    f"Found {len(self.revisions)} snapshot(s); at least 2 are needed to compare."
                ),
                hint="Run 'dirdiff record' again after the directory changes.",
            )
        return self.revisions[0], self.revisions[1]
