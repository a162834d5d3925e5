from __future__ import annotations

from pathlib import Path

import pytest

from dirdiff.config import CliOverrides, load_effective_config


def _write_config(root: Path, *lines: str) -> None:
    (root / ".dirdiff.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'compare = "not-a-table"')

    with pytest.raises(ValueError, match="section 'compare'"):
        load_effective_config(tmp_path)


def test_unknown_hash_algorithm_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[capture]", 'hash_algorithm = "md5"')

    with pytest.raises(ValueError, match="capture.hash_algorithm"):
        load_effective_config(tmp_path)


def test_non_boolean_detect_changed_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[compare]", 'detect_changed = "yes"')

    with pytest.raises(ValueError, match="compare.detect_changed"):
        load_effective_config(tmp_path)


def test_exclude_globs_must_be_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, "[capture]", "exclude_globs = [1, 2]")

    with pytest.raises(ValueError, match="capture.exclude_globs"):
        load_effective_config(tmp_path)


def test_history_file_must_be_a_bare_name(tmp_path: Path) -> None:
    _write_config(tmp_path, "[storage]", 'history_file = "../escape.csv"')

    with pytest.raises(ValueError, match="storage.history_file"):
        load_effective_config(tmp_path)


def test_invalid_tie_break_override_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.tie_break"):
        load_effective_config(tmp_path, CliOverrides(tie_break="coin-flip"))
