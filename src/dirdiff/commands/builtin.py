"""Built-in dirdiff commands."""

from __future__ import annotations

from pathlib import Path

from dirdiff.commands.registry import CommandHandler, CommandRegistry
from dirdiff.config import AppConfig, CliOverrides, load_effective_config
from dirdiff.diff import PhaseObserver, compare_latest, compare_remote, compare_snapshots
from dirdiff.errors import CaptureError
from dirdiff.logging import JsonlAuditLogger, millis_to_iso
from dirdiff.report import result_to_dict
from dirdiff.snapshot import Clock, SnapshotLog, capture_snapshot, claim_owner, verify_owner


def register_builtin_commands(
    registry: CommandRegistry,
    overrides: CliOverrides,
    on_phase: PhaseObserver | None = None,
    clock: Clock | None = None,
) -> None:
    """Register every CLI command against shared startup overrides."""
    registry.register("record", _record_handler(overrides, clock))
    registry.register("history", _history_handler(overrides, on_phase))
    registry.register("compare-dirs", _compare_dirs_handler(overrides, on_phase))
    registry.register("compare", _compare_remote_handler())
    registry.register("revisions", _revisions_handler(overrides))
    registry.register("audit", _audit_handler(overrides))


def _config_for(arguments: dict[str, object], key: str, overrides: CliOverrides) -> AppConfig:
    raw_path = arguments.get(key)
    if not isinstance(raw_path, str) or not raw_path:
        raise ValueError(f"Argument '{key}' must be a non-empty path.")
    return load_effective_config(Path(raw_path), overrides)


def _record_handler(overrides: CliOverrides, clock: Clock | None) -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = _config_for(arguments, "path", overrides)
        verify_owner(config.root_marker_path, config.root)
        profile: dict[str, object] = {}
        records = capture_snapshot(
            config.root,
            config.capture,
            clock=clock,
            exclude_dirs=(config.data_dir,),
            profile=profile,
        )
        if not records:
            raise CaptureError(
                reason=f"No visible files under {config.root}; nothing was recorded.",
                hint="An empty snapshot cannot be stored, so the latest snapshot is unchanged.",
            )
        log = SnapshotLog(config.history_path)
        written = log.append(records)
        claim_owner(config.root_marker_path, config.root)
        snapshot_id = records[0].snapshot_id
        return {
            "root": str(config.root),
            "history_file": str(log.path),
            "recorded_files": written,
            "snapshot_id": snapshot_id,
            "snapshot_time": millis_to_iso(snapshot_id),
            "capture_profile": profile,
            "config": config.to_public_dict(),
        }

    return handler


def _history_handler(overrides: CliOverrides, on_phase: PhaseObserver | None) -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = _config_for(arguments, "path", overrides)
        verify_owner(config.root_marker_path, config.root)
        store = SnapshotLog(config.history_path).load()
        result = compare_snapshots(
            store,
            tie_break=config.compare.tie_break,
            detect_changed=config.compare.detect_changed,
            on_phase=on_phase,
        )
        return result_to_dict(result)

    return handler


def _compare_dirs_handler(
    overrides: CliOverrides, on_phase: PhaseObserver | None
) -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config_a = _config_for(arguments, "path_a", overrides)
        config_b = _config_for(arguments, "path_b", overrides)
        for config in (config_a, config_b):
            verify_owner(config.root_marker_path, config.root)
        result = compare_latest(
            SnapshotLog(config_a.history_path).load_latest(),
            SnapshotLog(config_b.history_path).load_latest(),
            tie_break=config_a.compare.tie_break,
            detect_changed=config_a.compare.detect_changed,
            on_phase=on_phase,
        )
        return result_to_dict(result)

    return handler


def _compare_remote_handler() -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        result = compare_remote(
            str(arguments.get("remote_host", "")),
            str(arguments.get("remote_directory", "")),
        )
        return result_to_dict(result)

    return handler


def _revisions_handler(overrides: CliOverrides) -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = _config_for(arguments, "path", overrides)
        verify_owner(config.root_marker_path, config.root)
        store = SnapshotLog(config.history_path).load()
        revisions = [
            {
                "snapshot_id": snapshot_id,
                "time": millis_to_iso(snapshot_id),
                "file_count": len(store.snapshot(snapshot_id)),
            }
            for snapshot_id in store.snapshot_ids()
        ]
        return {"history_file": str(config.history_path), "revisions": revisions}

    return handler


def _audit_handler(overrides: CliOverrides) -> CommandHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = _config_for(arguments, "path", overrides)
        limit = arguments.get("limit", 50)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError("Argument 'limit' must be a positive integer.")
        since = arguments.get("since")
        if since is not None and not isinstance(since, str):
            raise ValueError("Argument 'since' must be an ISO-8601 timestamp string.")
        events = JsonlAuditLogger(config.audit_path).read(since=since, limit=limit)
        return {"audit_file": str(config.audit_path), "events": events}

    return handler
