"""Render comparison results and command payloads for output."""

from __future__ import annotations

from dataclasses import asdict

from dirdiff.diff import CATEGORIES, ResultSet, WorkingSet
from dirdiff.logging import millis_to_iso
from dirdiff.snapshot import sort_key


def result_to_dict(result: ResultSet) -> dict[str, object]:
    """Return a JSON-ready view of a ResultSet."""
    categories = reported_categories(result.changed_detection)
    payload: dict[str, object] = {
        "latest": _revision_dict(result.latest),
        "previous": _revision_dict(result.previous),
        "counts": {
            name: count
            for name, count in result.counts().items()
            if name == "unchanged" or name in categories
        },
        "has_changes": result.has_changes,
    }
    for name in categories:
        payload[name] = [asdict(entry) for entry in result.category(name)]
    return payload


def reported_categories(changed_detection: bool) -> tuple[str, ...]:
    """Return reported category names; "changed" only exists when detected."""
    if changed_detection:
        return CATEGORIES
    return tuple(name for name in CATEGORIES if name != "changed")


def _revision_dict(revision: int | None) -> dict[str, object] | None:
    if revision is None:
        return None
    return {"snapshot_id": revision, "time": millis_to_iso(revision)}


def render_comparison(payload: dict[str, object], verbose: bool = False) -> str:
    """Render a comparison payload as the plain-text changelog."""
    lines: list[str] = []
    latest = payload.get("latest")
    previous = payload.get("previous")
    if verbose and isinstance(latest, dict) and isinstance(previous, dict):
        lines.append(f"Latest revision at {latest.get('time')}")
        lines.append(f"Prior revision at {previous.get('time')}")
        counts = payload.get("counts")
        if isinstance(counts, dict):
            lines.append(f"Unchanged files: {counts.get('unchanged', 0)}")
        lines.append("")
    for name in CATEGORIES:
        entries = payload.get(name)
        if not isinstance(entries, list):
            continue
        if not entries:
            lines.append(f"no {name} files")
            continue
        lines.append(f"{name.capitalize()} files:")
        for entry in entries:
            if isinstance(entry, dict):
                lines.append(f"  {_describe_entry(name, entry)}")
    return "\n".join(lines) + "\n"


def _describe_entry(category: str, entry: dict[str, object]) -> str:
    if category == "renamed":
        return f"{entry['path']}: {entry['old_name']} -> {entry['new_name']}"
    if category == "moved":
        return f"{entry['name']}: {entry['old_path']} -> {entry['new_path']}"
    if category == "changed":
        return f"{entry['path']}/{entry['name']}: {entry['old_hash']} -> {entry['new_hash']}"
    return f"{entry['path']}/{entry['name']} ({entry['hash']})"


def render_record(payload: dict[str, object], verbose: bool = False) -> str:
    lines = [
        f"Recorded {payload.get('recorded_files')} files at {payload.get('snapshot_time')}",
    ]
    if verbose:
        lines.append(f"History file: {payload.get('history_file')}")
        profile = payload.get("capture_profile")
        if isinstance(profile, dict):
            for key in sorted(profile):
                lines.append(f"  {key}: {profile[key]}")
    return "\n".join(lines) + "\n"


def render_revisions(payload: dict[str, object], verbose: bool = False) -> str:
    revisions = payload.get("revisions")
    if not isinstance(revisions, list) or not revisions:
        return "no recorded revisions\n"
    lines = ["Found the following revision dates:"]
    for revision in revisions:
        if not isinstance(revision, dict):
            continue
        line = f"  {revision.get('time')}"
        if verbose:
            line += f" ({revision.get('snapshot_id')}, {revision.get('file_count')} files)"
        lines.append(line)
    return "\n".join(lines) + "\n"


def render_audit(payload: dict[str, object], verbose: bool = False) -> str:
    events = payload.get("events")
    if not isinstance(events, list) or not events:
        return "no audit events\n"
    lines: list[str] = []
    for event in events:
        if not isinstance(event, dict):
            continue
        status = "ok" if event.get("ok") else f"error {event.get('error_code')}"
        lines.append(f"{event.get('timestamp')} {event.get('command')} {status}")
    return "\n".join(lines) + "\n"


def render_working_set(phase: str, working_set: WorkingSet) -> str:
    """Describe the entries left in a WorkingSet after one phase."""
    entries = sorted(
        working_set.remaining(),
        key=lambda item: (item.side.value, sort_key(item.record)),
    )
    lines = [f"Remaining after {phase}: {len(entries)}"]
    for entry in entries:
        record = entry.record
        lines.append(
            f"  [{entry.side.value}] {record.path}/{record.name} {record.hash} {record.snapshot_id}"
        )
    return "\n".join(lines) + "\n"


RENDERERS = {
    "record": render_record,
    "history": render_comparison,
    "compare-dirs": render_comparison,
    "revisions": render_revisions,
    "audit": render_audit,
}
