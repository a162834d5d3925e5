"""Append-only snapshot history in ``hash,name,path,mod_date_millis`` lines."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from pathlib import Path

from dirdiff.errors import (
    DataDirConflictError,
    ParseError,
    RecordValidationError,
    SnapshotCollisionError,
)
from dirdiff.snapshot.models import FileRecord, SnapshotStore

FIELD_COUNT = 4


class SnapshotLog:
    """Append-only snapshot log and strict reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk history path."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def append(self, records: Sequence[FileRecord]) -> int:
        """Append one snapshot worth of records and return the number written."""
        if not records:
            return 0
        snapshot_ids = {record.snapshot_id for record in records}
        if len(snapshot_ids) != 1:
            raise ValueError("append() accepts exactly one snapshot at a time.")
        new_id = records[0].snapshot_id
        store = SnapshotStore.from_records(records)
        existing = self.load().snapshot_ids()
        if existing and existing[0] >= new_id:
            raise SnapshotCollisionError(
                reason=(
                    f"Snapshot {new_id} is not newer than stored snapshot {existing[0]}."
                ),
                hint="Wait at least one millisecond between captures of the same directory.",
            )
        lines = self._render(store.records)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("ab") as handle:
            handle.write(lines)
        return len(store.records)

    def load(self) -> SnapshotStore:
        """Load every persisted snapshot; any malformed line aborts the load."""
        if not self.exists():
            return SnapshotStore(records=())
        text = self._decode(self._path.read_bytes())
        records: list[FileRecord] = []
        reader = csv.reader(io.StringIO(text, newline=""))
        for row in reader:
            if not row:
                continue
            records.append(self._parse_row(row, reader.line_num))
        return SnapshotStore.from_records(records)

    def load_latest(self) -> SnapshotStore:
        """Load only the newest persisted snapshot."""
        return self.load().latest()

    def _render(self, records: Sequence[FileRecord]) -> bytes:
        """Encode a whole snapshot up front so a failure leaves the log untouched."""
        buffer = io.StringIO(newline="")
        writer = csv.writer(buffer, lineterminator="\n")
        for record in records:
            writer.writerow([record.hash, record.name, record.path, record.snapshot_id])
        try:
            return buffer.getvalue().encode("utf-8")
        except UnicodeEncodeError as error:
            raise RecordValidationError(
                reason="Snapshot holds a file name that is not valid UTF-8.",
                hint="Rename the file; nothing was written to the history log.",
            ) from error

    def _decode(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as error:
            line_number = data.count(b"\n", 0, error.start) + 1
            raise ParseError(
                reason=f"{self._path}:{line_number}: line is not valid UTF-8.",
                hint="Restore the line from a backup or remove the whole snapshot.",
                line_number=line_number,
            ) from error

    def _parse_row(self, row: list[str], line_number: int) -> FileRecord:
        if len(row) != FIELD_COUNT:
            raise ParseError(
                reason=(
                    f"{self._path}:{line_number}: expected {FIELD_COUNT} fields, "
                    f"found {len(row)}."
                ),
                hint="Each line must be 'hash,name,path,mod_date_millis'.",
                line_number=line_number,
            )
        content_hash, name, path, raw_millis = row
        for label, value in (("hash", content_hash), ("name", name), ("path", path)):
            if not value:
                raise ParseError(
                    reason=f"{self._path}:{line_number}: field '{label}' is empty.",
                    hint="Restore the line from a backup or remove the whole snapshot.",
                    line_number=line_number,
                )
        if not (raw_millis.isascii() and raw_millis.isdigit()):
            raise ParseError(
                reason=(
                    f"{self._path}:{line_number}: timestamp {raw_millis!r} is not an integer."
                ),
                hint="Timestamps are whole, non-negative milliseconds since the Unix epoch.",
                line_number=line_number,
            )
        return FileRecord(hash=content_hash, name=name, path=path, snapshot_id=int(raw_millis))


def verify_owner(marker_path: Path, root: Path) -> None:
    """Raise unless the data dir holding ``marker_path`` is unclaimed or tracks ``root``."""
    if not marker_path.is_file():
        return
    owner = marker_path.read_text(encoding="utf-8", errors="surrogateescape").strip()
    if owner != str(root):
        raise DataDirConflictError(
            reason=f"Data directory {marker_path.parent} tracks {owner}, not {root}.",
            hint="Give each tracked directory its own --data-dir.",
        )


def claim_owner(marker_path: Path, root: Path) -> None:
    """Record ``root`` as the directory whose history lives beside ``marker_path``."""
    verify_owner(marker_path, root)
    if marker_path.is_file():
        return
    marker_path.parent.mkdir(parents=True, exist_ok=True)
    marker_path.write_text(f"{root}\n", encoding="utf-8", errors="surrogateescape")
