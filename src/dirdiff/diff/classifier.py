"""Ordered exact-match phases that partition a WorkingSet into outcomes.

Phase order is part of the contract: every phase only sees records that the
earlier phases left behind, so a record is claimed by the first rule it
satisfies.

1. unchanged: same hash, name, and path (counted, not reported)
2. renamed:   same hash and path, different name
3. moved:     same hash and name, different path
4. changed:   same name and path, different hash (only with ``detect_changed``)
5. added:     anything left on the latest side
6. missing:   anything left on the previous side

Duplicate content can give a record several candidate partners. The
``greedy`` tie-break visits previous-side records in ``(path, name, hash)``
order and pairs each with the first unconsumed latest-side candidate in
``(path, name)`` order; ``strict`` raises ``AmbiguousMatchError`` instead.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Hashable

from dirdiff.config import SUPPORTED_TIE_BREAKS
from dirdiff.diff.results import (
    AddedEntry,
    ChangedEntry,
    MissingEntry,
    MovedEntry,
    RenamedEntry,
    ResultAccumulator,
    ResultSet,
)
from dirdiff.diff.working_set import Side, WorkingEntry, WorkingSet
from dirdiff.errors import AmbiguousMatchError
from dirdiff.snapshot.models import FileRecord, sort_key

PHASE_UNCHANGED = "unchanged"
PHASE_RENAMED = "renamed"
PHASE_MOVED = "moved"
PHASE_CHANGED = "changed"
PHASE_ADDED = "added"
PHASE_MISSING = "missing"

PhaseObserver = Callable[[str, WorkingSet], None]
MatchRule = Callable[[FileRecord, FileRecord], bool]
IndexKey = Callable[[FileRecord], Hashable]


def _by_hash(record: FileRecord) -> Hashable:
    return record.hash


def _by_location(record: FileRecord) -> Hashable:
    return (record.path, record.name)


def is_unchanged(a: FileRecord, b: FileRecord) -> bool:
    return a.hash == b.hash and a.name == b.name and a.path == b.path


def is_renamed(a: FileRecord, b: FileRecord) -> bool:
    return a.hash == b.hash and a.path == b.path and a.name != b.name


def is_moved(a: FileRecord, b: FileRecord) -> bool:
    return a.hash == b.hash and a.name == b.name and a.path != b.path


def is_changed(a: FileRecord, b: FileRecord) -> bool:
    return a.name == b.name and a.path == b.path and a.hash != b.hash


def classify(
    working_set: WorkingSet,
    *,
    latest: int | None = None,
    previous: int | None = None,
    tie_break: str = "greedy",
    detect_changed: bool = False,
    on_phase: PhaseObserver | None = None,
) -> ResultSet:
    """Run every phase in order, draining ``working_set`` into a ResultSet."""
    if tie_break not in SUPPORTED_TIE_BREAKS:
        raise ValueError(f"Unknown tie-break policy: {tie_break}")
    strict = tie_break == "strict"
    results = ResultAccumulator(
        latest=latest,
        previous=previous,
        changed_detection=detect_changed,
    )

    def notify(phase: str) -> None:
        if on_phase is not None:
            on_phase(phase, working_set)

    unchanged = _pair_phase(working_set, PHASE_UNCHANGED, _by_hash, is_unchanged, strict)
    results.unchanged_count = len(unchanged)
    notify(PHASE_UNCHANGED)

    for old, new in _pair_phase(working_set, PHASE_RENAMED, _by_hash, is_renamed, strict):
        results.renamed.append(
            RenamedEntry(hash=new.hash, old_name=old.name, new_name=new.name, path=new.path)
        )
    notify(PHASE_RENAMED)

    for old, new in _pair_phase(working_set, PHASE_MOVED, _by_hash, is_moved, strict):
        results.moved.append(
            MovedEntry(hash=new.hash, name=new.name, old_path=old.path, new_path=new.path)
        )
    notify(PHASE_MOVED)

    if detect_changed:
        for old, new in _pair_phase(working_set, PHASE_CHANGED, _by_location, is_changed, strict):
            results.changed.append(
                ChangedEntry(name=new.name, path=new.path, old_hash=old.hash, new_hash=new.hash)
            )
        notify(PHASE_CHANGED)

    added = working_set.remove_matching(lambda entry: entry.side is Side.LATEST)
    for record in sorted((entry.record for entry in added), key=sort_key):
        results.added.append(AddedEntry(hash=record.hash, name=record.name, path=record.path))
    notify(PHASE_ADDED)

    missing = working_set.remove_matching(lambda entry: entry.side is Side.PREVIOUS)
    for record in sorted((entry.record for entry in missing), key=sort_key):
        results.missing.append(MissingEntry(hash=record.hash, name=record.name, path=record.path))
    notify(PHASE_MISSING)

    return results.freeze()


def _pair_phase(
    working_set: WorkingSet,
    phase: str,
    key: IndexKey,
    rule: MatchRule,
    strict: bool,
) -> list[tuple[FileRecord, FileRecord]]:
    """Pair previous/latest entries satisfying ``rule`` and remove them."""
    entries = working_set.remaining()
    previous = sorted(
        (entry for entry in entries if entry.side is Side.PREVIOUS),
        key=lambda entry: sort_key(entry.record),
    )
    candidates: dict[Hashable, list[WorkingEntry]] = defaultdict(list)
    for entry in sorted(
        (entry for entry in entries if entry.side is Side.LATEST),
        key=lambda entry: sort_key(entry.record),
    ):
        candidates[key(entry.record)].append(entry)

    if strict:
        _ensure_unambiguous(phase, previous, candidates, key, rule)

    consumed: set[int] = set()
    pairs: list[tuple[FileRecord, FileRecord]] = []
    for old in previous:
        for new in candidates.get(key(old.record), ()):
            if id(new) in consumed or not rule(old.record, new.record):
                continue
            consumed.add(id(old))
            consumed.add(id(new))
            pairs.append((old.record, new.record))
            break
    if consumed:
        working_set.remove_matching(lambda entry: id(entry) in consumed)
    return pairs


def _ensure_unambiguous(
    phase: str,
    previous: list[WorkingEntry],
    candidates: dict[Hashable, list[WorkingEntry]],
    key: IndexKey,
    rule: MatchRule,
) -> None:
    partners_of_latest: dict[int, list[FileRecord]] = defaultdict(list)
    for old in previous:
        matches = [
            new for new in candidates.get(key(old.record), ()) if rule(old.record, new.record)
        ]
        if len(matches) > 1:
            raise AmbiguousMatchError(
                reason=(
                    f"{phase}: previous file '{_describe(old.record)}' matches "
                    f"{len(matches)} latest files: "
                    + ", ".join(_describe(new.record) for new in matches)
                ),
                hint="Use the greedy tie-break to pair duplicates in path order.",
            )
        for new in matches:
            partners_of_latest[id(new)].append(old.record)
    for bucket in candidates.values():
        for new in bucket:
            partners = partners_of_latest.get(id(new), [])
            if len(partners) > 1:
                raise AmbiguousMatchError(
                    reason=(
                        f"{phase}: latest file '{_describe(new.record)}' matches "
                        f"{len(partners)} previous files: "
                        + ", ".join(_describe(record) for record in partners)
                    ),
                    hint="Use the greedy tie-break to pair duplicates in path order.",
                )


def _describe(record: FileRecord) -> str:
    return f"{record.path}/{record.name}"
