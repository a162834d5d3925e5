from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from dirdiff.cli import main


def _run(argv: list[str], clock_value: int | None = None) -> tuple[int, str, str]:
    out = io.StringIO()
    err = io.StringIO()
    clock = (lambda: clock_value) if clock_value is not None else None
    exit_code = main(argv, out_stream=out, err_stream=err, clock=clock)
    return exit_code, out.getvalue(), err.getvalue()


def test_compare_dirs_uses_first_directory_as_previous(tmp_path: Path) -> None:
    dir_a = tmp_path / "a"
    dir_b = tmp_path / "b"
    dir_a.mkdir()
    dir_b.mkdir()
    (dir_a / "shared.txt").write_bytes(b"shared")
    (dir_a / "only_a.txt").write_bytes(b"a")
    (dir_b / "shared.txt").write_bytes(b"shared")
    (dir_b / "only_b.txt").write_bytes(b"b")
    _run(["record", str(dir_a)], clock_value=1_000)
    _run(["record", str(dir_b)], clock_value=1_000)

    exit_code, out, _ = _run(["--json", "compare-dirs", str(dir_a), str(dir_b)])

    assert exit_code == 0
    result = json.loads(out)["result"]
    assert result["counts"]["unchanged"] == 1
    assert [entry["name"] for entry in result["added"]] == ["only_b.txt"]
    assert [entry["name"] for entry in result["missing"]] == ["only_a.txt"]
    assert (dir_a / ".dirdiff" / "audit.jsonl").is_file()


def test_compare_dirs_requires_snapshot_on_both_sides(tmp_path: Path) -> None:
    dir_a = tmp_path / "a"
    dir_b = tmp_path / "b"
    dir_a.mkdir()
    dir_b.mkdir()
    (dir_a / "x.txt").write_bytes(b"x")
    _run(["record", str(dir_a)], clock_value=1_000)

    exit_code, out, _ = _run(["--json", "compare-dirs", str(dir_a), str(dir_b)])

    assert exit_code == 1
    error = json.loads(out)["error"]
    assert error["code"] == "NOT_ENOUGH_REVISIONS"
    assert error["message"] == "The second directory has no recorded snapshot."


def test_remote_compare_is_not_implemented(tmp_path: Path) -> None:
    exit_code, out, err = _run(["compare", str(tmp_path), "backup", "/srv/photos"])

    assert exit_code == 1
    assert out == ""
    assert err.splitlines()[0] == (
        "dirdiff: error: Comparing against backup:/srv/photos is not implemented."
    )


def test_revisions_lists_newest_first(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"a")
    _run(["record", str(tmp_path)], clock_value=1_000)
    (tmp_path / "b.txt").write_bytes(b"b")
    _run(["record", str(tmp_path)], clock_value=61_000)

    exit_code, out, _ = _run(["--json", "revisions", str(tmp_path)])
    _, text, _ = _run(["revisions", str(tmp_path)])

    assert exit_code == 0
    assert json.loads(out)["result"]["revisions"] == [
        {"snapshot_id": 61_000, "time": "1970-01-01T00:01:01.000Z", "file_count": 2},
        {"snapshot_id": 1_000, "time": "1970-01-01T00:00:01.000Z", "file_count": 1},
    ]
    assert text.splitlines() == [
        "Found the following revision dates:",
        "  1970-01-01T00:01:01.000Z",
        "  1970-01-01T00:00:01.000Z",
    ]


def test_revisions_without_history(tmp_path: Path) -> None:
    exit_code, out, _ = _run(["revisions", str(tmp_path)])

    assert exit_code == 0
    assert out == "no recorded revisions\n"


def test_audit_command_reads_previous_runs(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"a")
    _run(["record", str(tmp_path)], clock_value=1_000)
    _run(["history", str(tmp_path)])

    exit_code, out, _ = _run(["--json", "audit", str(tmp_path), "--limit", "1"])

    assert exit_code == 0
    events = json.loads(out)["result"]["events"]
    assert len(events) == 1
    assert events[0]["command"] == "history"
    assert events[0]["ok"] is False
    assert events[0]["error_code"] == "NOT_ENOUGH_REVISIONS"


def test_audit_rejects_non_positive_limit(tmp_path: Path) -> None:
    exit_code, out, _ = _run(["--json", "audit", str(tmp_path), "--limit", "0"])

    assert exit_code == 1
    assert json.loads(out)["error"]["code"] == "INVALID_CONFIG"


def test_invalid_config_file_is_reported(tmp_path: Path) -> None:
    (tmp_path / ".dirdiff.toml").write_text('[compare]\ntie_break = "random"\n', encoding="utf-8")

    exit_code, out, _ = _run(["--json", "history", str(tmp_path)])

    assert exit_code == 1
    error = json.loads(out)["error"]
    assert error["code"] == "INVALID_CONFIG"
    assert error["message"] == "Config field 'compare.tie_break' must be one of: greedy, strict."


def test_custom_data_dir_holds_history_and_is_not_captured(tmp_path: Path) -> None:
    root = tmp_path / "tracked"
    data_dir = root / "state"
    root.mkdir()
    (root / "a.txt").write_bytes(b"a")
    _run(["--data-dir", str(data_dir), "record", str(root)], clock_value=1_000)

    exit_code, out, _ = _run(
        ["--json", "--data-dir", str(data_dir), "record", str(root)], clock_value=2_000
    )

    assert exit_code == 0
    assert json.loads(out)["result"]["recorded_files"] == 1
    assert (data_dir / "history.csv").is_file()
    assert (data_dir / "audit.jsonl").is_file()
    assert not (root / ".dirdiff").exists()


def test_unknown_subcommand_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(["snapshot", str(tmp_path)])

    assert excinfo.value.code == 2


def test_compare_dirs_rejects_shared_data_dir(tmp_path: Path) -> None:
    dir_a = tmp_path / "a"
    dir_b = tmp_path / "b"
    dir_a.mkdir()
    dir_b.mkdir()

    with pytest.raises(SystemExit) as excinfo:
        _run(["--data-dir", str(tmp_path / "state"), "compare-dirs", str(dir_a), str(dir_b)])

    assert excinfo.value.code == 2


def test_data_dir_tracks_a_single_root(tmp_path: Path) -> None:
    dir_a = tmp_path / "a"
    dir_b = tmp_path / "b"
    data_dir = tmp_path / "state"
    dir_a.mkdir()
    dir_b.mkdir()
    (dir_a / "only_a.txt").write_bytes(b"a")
    (dir_b / "only_b.txt").write_bytes(b"b")
    assert _run(["--data-dir", str(data_dir), "record", str(dir_a)], clock_value=1_000)[0] == 0
    history_before = (data_dir / "history.csv").read_bytes()

    record_code, record_out, _ = _run(
        ["--json", "--data-dir", str(data_dir), "record", str(dir_b)], clock_value=2_000
    )
    history_code, history_out, _ = _run(
        ["--json", "--data-dir", str(data_dir), "history", str(dir_b)]
    )

    assert record_code == 1
    assert json.loads(record_out)["error"]["code"] == "DATA_DIR_CONFLICT"
    assert history_code == 1
    assert json.loads(history_out)["error"]["code"] == "DATA_DIR_CONFLICT"
    assert (data_dir / "history.csv").read_bytes() == history_before
    assert (data_dir / "root.txt").read_text(encoding="utf-8") == f"{dir_a.resolve()}\n"


def test_recording_an_emptied_directory_is_an_error(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"a")
    _run(["record", str(tmp_path)], clock_value=1_000)
    (tmp_path / "a.txt").unlink()

    exit_code, out, err = _run(["record", str(tmp_path)], clock_value=2_000)

    assert exit_code == 1
    assert out == ""
    assert err.splitlines()[0] == (
        f"dirdiff: error: No visible files under {tmp_path.resolve()}; nothing was recorded."
    )
    _, revisions_out, _ = _run(["--json", "revisions", str(tmp_path)])
    assert [item["snapshot_id"] for item in json.loads(revisions_out)["result"]["revisions"]] == [
        1_000
    ]


def test_unwritable_audit_log_warns_without_failing(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory\n", encoding="utf-8")

    exit_code, out, err = _run(["--data-dir", str(blocker / "state"), "revisions", str(tmp_path)])

    assert exit_code == 0
    assert out == "no recorded revisions\n"
    assert err.startswith("dirdiff: warning: audit log not written:")
