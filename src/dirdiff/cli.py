"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path
from typing import TextIO

from dirdiff.commands import CommandRegistry, register_builtin_commands
from dirdiff.config import (
    AUDIT_LOG_FILE,
    DEFAULT_DATA_DIR_NAME,
    SUPPORTED_HASH_ALGORITHMS,
    SUPPORTED_TIE_BREAKS,
    CliOverrides,
)
from dirdiff.diff import PhaseObserver, WorkingSet
from dirdiff.errors import DirdiffError
from dirdiff.logging import AuditEvent, JsonlAuditLogger
from dirdiff.report import RENDERERS, render_working_set
from dirdiff.snapshot import Clock

_COMMAND_ARGUMENTS = (
    "path",
    "path_a",
    "path_b",
    "remote_host",
    "remote_directory",
    "limit",
    "since",
)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for every dirdiff command."""
    parser = argparse.ArgumentParser(
        prog="dirdiff",
        description="Track renamed, moved, added, and missing files between directory snapshots.",
    )
    parser.add_argument("--data-dir", default=None, help="Where history and audit files live")
    parser.add_argument("--json", action="store_true", help="Print JSON envelopes")
    parser.add_argument("--verbose", action="store_true", help="Print revision and capture details")
    parser.add_argument(
        "--debug", action="store_true", help="Print working set contents after each phase"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    record_p = sub.add_parser("record", help="Capture a new snapshot of a directory")
    record_p.add_argument("path")
    record_p.add_argument("--hash-algorithm", choices=SUPPORTED_HASH_ALGORITHMS, default=None)

    history_p = sub.add_parser("history", help="Compare the latest snapshot with the prior one")
    history_p.add_argument("path")
    _add_compare_options(history_p)

    compare_dirs_p = sub.add_parser(
        "compare-dirs", help="Compare the latest snapshots of two directories"
    )
    compare_dirs_p.add_argument("path_a")
    compare_dirs_p.add_argument("path_b")
    _add_compare_options(compare_dirs_p)

    compare_p = sub.add_parser("compare", help="Compare with a remote directory (not implemented)")
    compare_p.add_argument("path")
    compare_p.add_argument("remote_host")
    compare_p.add_argument("remote_directory")

    revisions_p = sub.add_parser("revisions", help="List recorded snapshot times")
    revisions_p.add_argument("path")

    audit_p = sub.add_parser("audit", help="Show recent command runs")
    audit_p.add_argument("path")
    audit_p.add_argument("--limit", type=int, default=50)
    audit_p.add_argument("--since", default=None)
    return parser


def _add_compare_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--tie-break", choices=SUPPORTED_TIE_BREAKS, default=None)
    parser.add_argument(
        "--detect-changed",
        action="store_const",
        const=True,
        default=None,
        help="Report same-name same-path files whose content changed",
    )


def main(
    argv: list[str] | None = None,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
    clock: Clock | None = None,
) -> int:
    """Entrypoint for the dirdiff command line."""
    out = out_stream or sys.stdout
    err = err_stream or sys.stderr
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "compare-dirs" and args.data_dir is not None:
        parser.error("--data-dir cannot be used with compare-dirs; each directory keeps its own")
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        hash_algorithm=getattr(args, "hash_algorithm", None),
        tie_break=getattr(args, "tie_break", None),
        detect_changed=getattr(args, "detect_changed", None),
    )
    arguments = {
        key: value
        for key, value in vars(args).items()
        if key in _COMMAND_ARGUMENTS and value is not None
    }
    registry = CommandRegistry()
    register_builtin_commands(
        registry,
        overrides=overrides,
        on_phase=_debug_observer(err) if args.debug else None,
        clock=clock,
    )
    run_id = f"run-{uuid.uuid4().hex[:12]}"

    try:
        result = registry.dispatch(args.command, arguments)
    except DirdiffError as error:
        response = error_response(run_id, error.code, error.reason, error.hint)
    except ValueError as error:
        response = error_response(run_id, "INVALID_CONFIG", str(error), "")
    else:
        response = success_response(run_id, result)

    try:
        _log_run(overrides, args.command, arguments, response)
    except OSError as error:
        err.write(f"dirdiff: warning: audit log not written: {error.strerror or error}\n")
    if args.json:
        out.write(f"{json.dumps(response, sort_keys=True)}\n")
    elif response["ok"]:
        renderer = RENDERERS.get(args.command)
        if renderer is not None:
            out.write(renderer(response["result"], verbose=args.verbose or args.debug))
    else:
        error_payload = response["error"]
        err.write(f"dirdiff: error: {error_payload['message']}\n")
        if error_payload.get("hint"):
            err.write(f"hint: {error_payload['hint']}\n")
    return 0 if response["ok"] else 1


def success_response(run_id: str, result: dict[str, object]) -> dict[str, object]:
    """Build success envelope."""
    return {"run_id": run_id, "ok": True, "result": result}


def error_response(run_id: str, code: str, message: str, hint: str) -> dict[str, object]:
    """Build explicit error envelope."""
    return {
        "run_id": run_id,
        "ok": False,
        "result": {},
        "error": {"code": code, "message": message, "hint": hint},
    }


def _debug_observer(err: TextIO) -> PhaseObserver:
    def observe(phase: str, working_set: WorkingSet) -> None:
        err.write(render_working_set(phase, working_set))

    return observe


def _log_run(
    overrides: CliOverrides,
    command: str,
    arguments: dict[str, object],
    response: dict[str, object],
) -> None:
    """Append one sanitized audit event next to the primary directory's history."""
    audit_path = _audit_path(overrides, arguments)
    if audit_path is None:
        return
    error_payload = response.get("error")
    error_code = str(error_payload["code"]) if isinstance(error_payload, dict) else None
    event = AuditEvent.for_run(str(response["run_id"]), command, arguments, error_code)
    JsonlAuditLogger(audit_path).append(event)


def _audit_path(overrides: CliOverrides, arguments: dict[str, object]) -> Path | None:
    raw_path = arguments.get("path", arguments.get("path_a"))
    if not isinstance(raw_path, str):
        return None
    root = Path(raw_path).resolve()
    if not root.is_dir():
        return None
    data_dir = overrides.data_dir or root / DEFAULT_DATA_DIR_NAME
    return data_dir / AUDIT_LOG_FILE


if __name__ == "__main__":
    raise SystemExit(main())
