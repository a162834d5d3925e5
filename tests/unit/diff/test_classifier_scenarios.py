from __future__ import annotations

from dirdiff.diff import AddedEntry, MissingEntry, MovedEntry, RenamedEntry, compare_snapshots
from dirdiff.snapshot import FileRecord, SnapshotStore

PREVIOUS = 1_700_000_000_000
LATEST = 1_700_000_060_000


def _store(
    previous: list[tuple[str, str, str]], latest: list[tuple[str, str, str]]
) -> SnapshotStore:
    records = [FileRecord(hash=h, name=n, path=p, snapshot_id=PREVIOUS) for h, n, p in previous]
    records += [FileRecord(hash=h, name=n, path=p, snapshot_id=LATEST) for h, n, p in latest]
    return SnapshotStore.from_records(records)


def test_identical_snapshots_report_nothing() -> None:
    files = [("h1", "a.txt", "/d"), ("h2", "b.txt", "/d")]

    result = compare_snapshots(_store(files, files))

    assert result.unchanged_count == 2
    assert result.renamed == ()
    assert result.moved == ()
    assert result.added == ()
    assert result.missing == ()
    assert result.has_changes is False


def test_same_content_same_directory_new_name_is_renamed() -> None:
    result = compare_snapshots(_store([("h1", "a.txt", "/d")], [("h1", "a2.txt", "/d")]))

    assert result.renamed == (
        RenamedEntry(hash="h1", old_name="a.txt", new_name="a2.txt", path="/d"),
    )
    assert result.moved == ()
    assert result.added == ()
    assert result.missing == ()


def test_same_content_same_name_new_directory_is_moved() -> None:
    result = compare_snapshots(_store([("h1", "a.txt", "/d1")], [("h1", "a.txt", "/d2")]))

    assert result.moved == (MovedEntry(hash="h1", name="a.txt", old_path="/d1", new_path="/d2"),)
    assert result.renamed == ()
    assert result.added == ()
    assert result.missing == ()


def test_new_file_is_added() -> None:
    result = compare_snapshots(
        _store([("h1", "a.txt", "/d")], [("h1", "a.txt", "/d"), ("h3", "c.txt", "/d")])
    )

    assert result.renamed == ()
    assert result.moved == ()
    assert result.added == (AddedEntry(hash="h3", name="c.txt", path="/d"),)
    assert result.missing == ()
    assert result.unchanged_count == 1


def test_vanished_file_is_missing() -> None:
    result = compare_snapshots(
        _store([("h1", "a.txt", "/d"), ("h4", "d.txt", "/d")], [("h1", "a.txt", "/d")])
    )

    assert result.missing == (MissingEntry(hash="h4", name="d.txt", path="/d"),)
    assert result.added == ()
    assert result.renamed == ()
    assert result.moved == ()


def test_renamed_and_moved_file_is_added_plus_missing() -> None:
    result = compare_snapshots(_store([("h1", "a.txt", "/d1")], [("h1", "b.txt", "/d2")]))

    assert result.renamed == ()
    assert result.moved == ()
    assert result.added == (AddedEntry(hash="h1", name="b.txt", path="/d2"),)
    assert result.missing == (MissingEntry(hash="h1", name="a.txt", path="/d1"),)


def test_edited_file_is_added_plus_missing_without_changed_phase() -> None:
    result = compare_snapshots(_store([("h1", "a.txt", "/d")], [("h2", "a.txt", "/d")]))

    assert result.changed == ()
    assert result.added == (AddedEntry(hash="h2", name="a.txt", path="/d"),)
    assert result.missing == (MissingEntry(hash="h1", name="a.txt", path="/d"),)


def test_result_carries_compared_revisions() -> None:
    result = compare_snapshots(_store([("h1", "a.txt", "/d")], [("h1", "a.txt", "/d")]))

    assert result.latest == LATEST
    assert result.previous == PREVIOUS


def test_only_two_newest_snapshots_are_compared() -> None:
    older = [FileRecord(hash="h9", name="old.txt", path="/d", snapshot_id=PREVIOUS - 5_000)]
    store = SnapshotStore.from_records(
        older
        + list(_store([("h1", "a.txt", "/d")], [("h1", "a.txt", "/d")]).records)
    )

    result = compare_snapshots(store)

    assert result.missing == ()
    assert result.unchanged_count == 1
