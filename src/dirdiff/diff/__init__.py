"""Snapshot comparison: revision selection, working set, and classifier."""

from .classifier import (
    PHASE_ADDED,
    PHASE_CHANGED,
    PHASE_MISSING,
    PHASE_MOVED,
    PHASE_RENAMED,
    PHASE_UNCHANGED,
    PhaseObserver,
    classify,
    is_changed,
    is_moved,
    is_renamed,
    is_unchanged,
)
from .compare import compare_latest, compare_remote, compare_snapshots
from .results import (
    CATEGORIES,
    AddedEntry,
    ChangedEntry,
    MissingEntry,
    MovedEntry,
    RenamedEntry,
    ResultSet,
)
from .revisions import RevisionIndex
from .working_set import Side, WorkingEntry, WorkingSet

__all__ = [
    "AddedEntry",
    "CATEGORIES",
    "ChangedEntry",
    "MissingEntry",
    "MovedEntry",
    "PHASE_ADDED",
    "PHASE_CHANGED",
    "PHASE_MISSING",
    "PHASE_MOVED",
    "PHASE_RENAMED",
    "PHASE_UNCHANGED",
    "PhaseObserver",
    "RenamedEntry",
    "ResultSet",
    "RevisionIndex",
    "Side",
    "WorkingEntry",
    "WorkingSet",
    "classify",
    "compare_latest",
    "compare_remote",
    "compare_snapshots",
    "is_changed",
    "is_moved",
    "is_renamed",
    "is_unchanged",
]
