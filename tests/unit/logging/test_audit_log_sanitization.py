from __future__ import annotations

import io
import json
from pathlib import Path

from dirdiff.cli import main
from dirdiff.logging import sanitize_arguments


def test_audit_log_reduces_remote_host_to_presence(tmp_path: Path) -> None:
    main(
        ["compare", str(tmp_path), "admin:hunter2@backup", "/srv/data"],
        out_stream=io.StringIO(),
        err_stream=io.StringIO(),
    )

    audit_path = tmp_path / ".dirdiff" / "audit.jsonl"
    event = json.loads(audit_path.read_text(encoding="utf-8").splitlines()[-1])
    metadata = event["metadata"]

    assert metadata["remote_host_present"] is True
    assert metadata["remote_host_length"] == len("admin:hunter2@backup")
    assert "remote_host" not in metadata
    assert "hunter2" not in json.dumps(event, sort_keys=True)
    assert event["error_code"] == "NOT_IMPLEMENTED"


def test_sanitize_keeps_paths_numbers_and_flags() -> None:
    sanitized = sanitize_arguments(
        {
            "path": "/data/photos",
            "limit": 5,
            "detect_changed": True,
            "since": "2026-01-01T00:00:00.000Z",
            "globs": ["*.tmp", "*.bak"],
            "extra": {"b": 1, "a": 2},
        }
    )

    assert sanitized == {
        "detect_changed": True,
        "extra_keys": ["a", "b"],
        "extra_type": "dict",
        "globs_length": 2,
        "globs_type": "list",
        "limit": 5,
        "path": "/data/photos",
        "since": "2026-01-01T00:00:00.000Z",
    }
