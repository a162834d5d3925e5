"""Structured JSONL audit log of command runs."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

# Arguments that never carry anything more sensitive than a local path or choice.
_PLAIN_STRING_KEYS = frozenset({"path", "path_a", "path_b", "tie_break", "hash_algorithm", "since"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized representation of a single command run."""

    timestamp: str
    run_id: str
    command: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]

    @classmethod
    def for_run(
        cls,
        run_id: str,
        command: str,
        arguments: dict[str, object],
        error_code: str | None = None,
    ) -> AuditEvent:
        """Build the event for one finished run; a set error code marks failure."""
        return cls(
            timestamp=utc_timestamp(),
            run_id=run_id,
            command=command,
            ok=error_code is None,
            error_code=error_code,
            metadata=sanitize_arguments(arguments),
        )


def _to_iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return _to_iso(datetime.now(tz=UTC))


def millis_to_iso(millis: int) -> str:
    """Render a snapshot id as an ISO-8601 UTC timestamp."""
    return _to_iso(datetime.fromtimestamp(millis / 1000, tz=UTC))


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Keep paths, flags, and numbers; reduce other values to their shape."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        sanitized.update(_reduce_value(key, arguments[key]))
    return sanitized


def _reduce_value(key: str, value: object) -> dict[str, object]:
    if isinstance(value, str):
        if key in _PLAIN_STRING_KEYS:
            return {key: value}
        return {f"{key}_present": True, f"{key}_length": len(value)}
    if value is None or isinstance(value, (bool, int, float)):
        return {key: value}
    if isinstance(value, (list, tuple)):
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(k) for k in value)}
    return {f"{key}_type": type(value).__name__}


class JsonlAuditLogger:
    """Append-only JSONL audit file beside a directory's snapshot history."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line, creating the data dir."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(asdict(event), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Return the newest ``limit`` events at or after ``since``, oldest first.

        Blank and unparseable lines are ignored so a torn final write does not
        hide the rest of the log.
        """
        if limit < 1:
            return []
        tail: deque[dict[str, object]] = deque(maxlen=limit)
        for event in self._iter_events():
            if since is not None:
                timestamp = event.get("timestamp")
                if not isinstance(timestamp, str) or timestamp < since:
                    continue
            tail.append(event)
        return list(tail)

    def _iter_events(self) -> Iterator[dict[str, object]]:
        if not self._path.is_file():
            return
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(event, dict):
                    yield event
