"""Comparison entry points over persisted snapshot stores."""

from __future__ import annotations

from dirdiff.diff.classifier import PhaseObserver, classify
from dirdiff.diff.results import ResultSet
from dirdiff.diff.revisions import RevisionIndex
from dirdiff.diff.working_set import WorkingSet
from dirdiff.errors import NotImplementedFeatureError, PreconditionError
from dirdiff.snapshot.models import SnapshotStore


def compare_snapshots(
    store: SnapshotStore,
    *,
    tie_break: str = "greedy",
    detect_changed: bool = False,
    on_phase: PhaseObserver | None = None,
) -> ResultSet:
    """Classify the latest snapshot of ``store`` against the one before it."""
    latest, previous = RevisionIndex.from_store(store).select_pair()
    working_set = WorkingSet.seed(store, latest=latest, previous=previous)
    return classify(
        working_set,
        latest=latest,
        previous=previous,
        tie_break=tie_break,
        detect_changed=detect_changed,
        on_phase=on_phase,
    )


def compare_latest(
    store_a: SnapshotStore,
    store_b: SnapshotStore,
    *,
    tie_break: str = "greedy",
    detect_changed: bool = False,
    on_phase: PhaseObserver | None = None,
) -> ResultSet:
    """Classify directory B's latest snapshot against directory A's latest snapshot.

    A plays the previous side and B the latest side, so "added" means present
    only in B and "missing" means present only in A.
    """
    ids_a = store_a.snapshot_ids()
    ids_b = store_b.snapshot_ids()
    for label, ids in (("first", ids_a), ("second", ids_b)):
        if not ids:
            raise PreconditionError(
                reason=f"The {label} directory has no recorded snapshot.",
                hint="Run 'dirdiff record' on both directories before comparing them.",
            )
    working_set = WorkingSet.from_sides(
        previous=store_a.snapshot(ids_a[0]),
        latest=store_b.snapshot(ids_b[0]),
    )
    return classify(
        working_set,
        latest=ids_b[0],
        previous=ids_a[0],
        tie_break=tie_break,
        detect_changed=detect_changed,
        on_phase=on_phase,
    )


def compare_remote(remote_host: str, remote_directory: str) -> ResultSet:
    """Cross-host comparison is declared by the CLI but has no transport."""
    raise NotImplementedFeatureError(
        reason=(
            f"Comparing against {remote_host}:{remote_directory} is not implemented."
        ),
        hint="Copy the remote history file locally and use 'dirdiff compare-dirs'.",
    )
