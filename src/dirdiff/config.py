"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = ".dirdiff.toml"
DEFAULT_DATA_DIR_NAME = ".dirdiff"
DEFAULT_HISTORY_FILE = "history.csv"
AUDIT_LOG_FILE = "audit.jsonl"
ROOT_MARKER_FILE = "root.txt"

SUPPORTED_HASH_ALGORITHMS = ("sha1", "sha256")
SUPPORTED_TIE_BREAKS = ("greedy", "strict")

DEFAULT_HASH_ALGORITHM = "sha1"
DEFAULT_TIE_BREAK = "greedy"
DEFAULT_EXCLUDE_GLOBS: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class CaptureConfig:
    """Directory walk and hashing settings."""

    hash_algorithm: str
    exclude_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class CompareConfig:
    """Classifier settings."""

    tie_break: str
    detect_changed: bool


@dataclass(slots=True, frozen=True)
class StorageConfig:
    """Snapshot history file settings."""

    history_file: str


@dataclass(slots=True, frozen=True)
class AppConfig:
    """Fully merged configuration for one tracked directory."""

    root: Path
    data_dir: Path
    capture: CaptureConfig
    compare: CompareConfig
    storage: StorageConfig

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.storage.history_file

    @property
    def audit_path(self) -> Path:
        return self.data_dir / AUDIT_LOG_FILE

    @property
    def root_marker_path(self) -> Path:
        return self.data_dir / ROOT_MARKER_FILE

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for JSON output."""
        return {
            "root": str(self.root),
            "data_dir": str(self.data_dir),
            "capture": {
                "hash_algorithm": self.capture.hash_algorithm,
                "exclude_globs": list(self.capture.exclude_globs),
            },
            "compare": {
                "tie_break": self.compare.tie_break,
                "detect_changed": self.compare.detect_changed,
            },
            "storage": {
                "history_file": self.storage.history_file,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    hash_algorithm: str | None = None
    tie_break: str | None = None
    detect_changed: bool | None = None


def default_config(root: Path) -> AppConfig:
    """Build default config for a tracked directory."""
    resolved_root = root.resolve()
    return AppConfig(
        root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIR_NAME,
        capture=CaptureConfig(
            hash_algorithm=DEFAULT_HASH_ALGORITHM,
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
        ),
        compare=CompareConfig(tie_break=DEFAULT_TIE_BREAK, detect_changed=False),
        storage=StorageConfig(history_file=DEFAULT_HISTORY_FILE),
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional .dirdiff.toml from the tracked directory."""
    config_path = root / CONFIG_FILE_NAME
    if not config_path.is_file():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _choice(value: object, name: str, choices: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value not in choices:
        raise ValueError(f"Config field '{name}' must be one of: {', '.join(choices)}.")
    return value


def _file_name(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    if "/" in value or "\\" in value:
        raise ValueError(f"Config field '{name}' must be a bare file name.")
    return value


def merge_config(base: AppConfig, payload: dict[str, object], overrides: CliOverrides) -> AppConfig:
    """Merge defaults, config file, then CLI overrides."""
    capture_payload = _get_table(payload, "capture")
    compare_payload = _get_table(payload, "compare")
    storage_payload = _get_table(payload, "storage")

    hash_algorithm = base.capture.hash_algorithm
    if "hash_algorithm" in capture_payload:
        hash_algorithm = _choice(
            capture_payload["hash_algorithm"],
            "capture.hash_algorithm",
            SUPPORTED_HASH_ALGORITHMS,
        )
    exclude_globs = base.capture.exclude_globs
    if "exclude_globs" in capture_payload:
        exclude_globs = _tuple_of_strings(
            capture_payload["exclude_globs"], "capture", "exclude_globs"
        )

    tie_break = base.compare.tie_break
    if "tie_break" in compare_payload:
        tie_break = _choice(compare_payload["tie_break"], "compare.tie_break", SUPPORTED_TIE_BREAKS)
    detect_changed = base.compare.detect_changed
    if "detect_changed" in compare_payload:
        raw_detect_changed = compare_payload["detect_changed"]
        if not isinstance(raw_detect_changed, bool):
            raise ValueError("Config field 'compare.detect_changed' must be a boolean.")
        detect_changed = raw_detect_changed

    history_file = base.storage.history_file
    if "history_file" in storage_payload:
        history_file = _file_name(storage_payload["history_file"], "storage.history_file")

    merged = AppConfig(
        root=base.root,
        data_dir=base.data_dir,
        capture=CaptureConfig(hash_algorithm=hash_algorithm, exclude_globs=exclude_globs),
        compare=CompareConfig(tie_break=tie_break, detect_changed=detect_changed),
        storage=StorageConfig(history_file=history_file),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: AppConfig, overrides: CliOverrides) -> AppConfig:
    """Apply startup overrides at highest precedence."""
    hash_algorithm = config.capture.hash_algorithm
    if overrides.hash_algorithm is not None:
        hash_algorithm = _choice(
            overrides.hash_algorithm, "overrides.hash_algorithm", SUPPORTED_HASH_ALGORITHMS
        )
    tie_break = config.compare.tie_break
    if overrides.tie_break is not None:
        tie_break = _choice(overrides.tie_break, "overrides.tie_break", SUPPORTED_TIE_BREAKS)
    detect_changed = (
        overrides.detect_changed
        if overrides.detect_changed is not None
        else config.compare.detect_changed
    )
    data_dir = overrides.data_dir or config.data_dir
    return AppConfig(
        root=config.root,
        data_dir=data_dir.resolve(),
        capture=CaptureConfig(
            hash_algorithm=hash_algorithm,
            exclude_globs=config.capture.exclude_globs,
        ),
        compare=CompareConfig(tie_break=tie_break, detect_changed=detect_changed),
        storage=config.storage,
    )


def load_effective_config(root: Path, overrides: CliOverrides | None = None) -> AppConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
