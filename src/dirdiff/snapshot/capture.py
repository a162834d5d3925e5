"""Deterministic directory walk and content hashing for one snapshot."""

from __future__ import annotations

import fnmatch
import hashlib
import os
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path

from dirdiff.config import CaptureConfig
from dirdiff.errors import CaptureError
from dirdiff.snapshot.models import ROOT_PATH, FileRecord

_HASH_CHUNK_BYTES = 1024 * 128

Clock = Callable[[], int]


@dataclass(slots=True, frozen=True)
class CaptureProfile:
    """Deterministic diagnostics for one capture pass."""

    total_candidates: int
    hidden_skipped: int
    excluded_by_glob: int
    hashed_files: int
    hash_seconds: float
    total_seconds: float


@dataclass(slots=True, frozen=True)
class _CandidateFile:
    """Regular file discovered during traversal."""

    relative_path: str
    full_path: Path


@dataclass(slots=True, frozen=True)
class _ScanResult:
    """Candidate files and deterministic scan counters."""

    candidates: tuple[_CandidateFile, ...]
    total_candidates: int
    hidden_skipped: int
    excluded_by_glob: int


def now_millis() -> int:
    """Return the current wall-clock time truncated to whole milliseconds."""
    return time.time_ns() // 1_000_000


def capture_snapshot(
    root: Path,
    config: CaptureConfig,
    *,
    clock: Clock | None = None,
    exclude_dirs: tuple[Path, ...] = (),
    profile: dict[str, object] | None = None,
) -> list[FileRecord]:
    """Walk a directory and return one snapshot of hashed file records.

    Hidden entries (names starting with ``.``) are skipped and hidden
    directories are not descended into. Any file that cannot be read aborts
    the whole capture so a partial snapshot is never produced.
    """
    started = time.perf_counter()
    if not root.exists():
        raise CaptureError(
            reason=f"Path does not exist: {root}",
            hint="Pass an existing directory to record.",
        )
    if not root.is_dir():
        raise CaptureError(
            reason=f"Path must be a directory: {root}",
            hint="Pass a directory, not a file.",
        )
    resolved = root.resolve()
    pruned = {path.resolve() for path in exclude_dirs}
    scan = _scan_tree(resolved, config.exclude_globs, pruned)
    for candidate in scan.candidates:
        _require_utf8_name(candidate)
    snapshot_id = (clock or now_millis)()

    records: list[FileRecord] = []
    hash_seconds = 0.0
    for candidate in scan.candidates:
        hash_started = time.perf_counter()
        content_hash = hash_file(candidate.full_path, config.hash_algorithm)
        hash_seconds += time.perf_counter() - hash_started
        parent = Path(candidate.relative_path).parent.as_posix()
        records.append(
            FileRecord(
                hash=content_hash,
                name=candidate.full_path.name,
                path=parent if parent != "." else ROOT_PATH,
                snapshot_id=snapshot_id,
            )
        )

    if profile is not None:
        payload = CaptureProfile(
            total_candidates=scan.total_candidates,
            hidden_skipped=scan.hidden_skipped,
            excluded_by_glob=scan.excluded_by_glob,
            hashed_files=len(records),
            hash_seconds=hash_seconds,
            total_seconds=time.perf_counter() - started,
        )
        profile.update(asdict(payload))
    return records


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def _require_utf8_name(candidate: _CandidateFile) -> None:
    try:
        candidate.relative_path.encode("utf-8")
    except UnicodeEncodeError as error:
        raise CaptureError(
            reason=f"File name {candidate.relative_path!r} is not valid UTF-8.",
            hint="Rename the file; history lines are stored as UTF-8 text. Nothing was recorded.",
        ) from error


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def _scan_tree(root: Path, exclude_globs: tuple[str, ...], pruned: set[Path]) -> _ScanResult:
    """Walk tree depth-first in sorted name order."""
    candidates: list[_CandidateFile] = []
    total_candidates = 0
    hidden_skipped = 0
    excluded_by_glob = 0
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError as error:
            raise CaptureError(
                reason=f"Cannot list directory {current}: {error.strerror or error}",
                hint="Fix the directory permissions and record again.",
            ) from error
        for entry in reversed(ordered_entries):
            if is_hidden(entry.name):
                hidden_skipped += 1
                continue
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if full_path in pruned or should_exclude(relative, exclude_globs):
                    continue
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            total_candidates += 1
            if should_exclude(relative, exclude_globs):
                excluded_by_glob += 1
                continue
            candidates.append(_CandidateFile(relative_path=relative, full_path=full_path))
    candidates.sort(key=lambda item: item.relative_path)
    return _ScanResult(
        candidates=tuple(candidates),
        total_candidates=total_candidates,
        hidden_skipped=hidden_skipped,
        excluded_by_glob=excluded_by_glob,
    )


def hash_file(path: Path, algorithm: str) -> str:
    """Hash full file content in chunked reads."""
    digest = hashlib.new(algorithm)
    try:
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(_HASH_CHUNK_BYTES)
                if not chunk:
                    break
                digest.update(chunk)
    except OSError as error:
        raise CaptureError(
            reason=f"Cannot read file {path}: {error.strerror or error}",
            hint="No snapshot was written; fix the file permissions and record again.",
        ) from error
    return digest.hexdigest()
