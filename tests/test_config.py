from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from todoist_backup.config import load_config
from todoist_backup.contracts.config import BackupConfig, StatusAliases
from todoist_backup.contracts.exceptions import ConfigError


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_applies_defaults(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path / "todoist-backup.json", {"roam_graph": "demo"}))

    assert config.roam_graph == "demo"
    assert config.page_prefix == "todoist"
    assert config.page_mode == "task"
    assert config.interval_minutes == 5
    assert config.interval_seconds == 300.0
    assert config.include_comments is False
    assert config.status_aliases == StatusAliases(active="◼️", completed="✅", deleted="❌")
    assert config.todoist_token is None


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading config file"):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "todoist-backup.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(path)


def test_load_config_validation_error_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="invalid config"):
        load_config(_write(tmp_path / "todoist-backup.json", {"page_mode": "weekly"}))


def test_patterns_file_is_resolved_against_config_dir(tmp_path: Path) -> None:
    (tmp_path / "patterns.txt").write_text("#urgent\n/^Chore/\n\n  standup\n", encoding="utf-8")
    config_path = _write(
        tmp_path / "todoist-backup.json",
        {"roam_graph": "demo", "exclude_title_patterns": ["inline"], "exclude_patterns_file": "patterns.txt"},
    )

    config = load_config(config_path)

    assert config.exclude_patterns_file == (tmp_path / "patterns.txt").resolve()
    assert config.exclude_title_patterns == ["inline", "#urgent", "/^Chore/", "  standup"]


def test_missing_patterns_file_raises(tmp_path: Path) -> None:
    config_path = _write(tmp_path / "todoist-backup.json", {"roam_graph": "demo", "exclude_patterns_file": "nope.txt"})

    with pytest.raises(ConfigError, match="exclude patterns file"):
        load_config(config_path)


def test_interval_is_clamped_to_one_minute() -> None:
    assert BackupConfig(roam_graph="g", interval_minutes=0).interval_minutes == 1
    assert BackupConfig(roam_graph="g", interval_minutes=-5).interval_seconds == 60.0


@pytest.mark.parametrize(("raw", "expected"), [("  notes/ ", "notes"), ("", "todoist"), (None, "todoist"), ("a/b", "a/b")])
def test_page_prefix_is_normalized(raw: str | None, expected: str) -> None:
    assert BackupConfig(roam_graph="g", page_prefix=raw).page_prefix == expected


def test_blank_tokens_are_unset() -> None:
    config = BackupConfig(roam_graph="g", todoist_token="  ", roam_token=" r ")

    assert config.todoist_token is None
    assert config.roam_token is not None
    assert config.roam_token.get_secret_value() == "r"


def test_tokens_are_not_exposed_in_repr() -> None:
    config = BackupConfig(roam_graph="g", todoist_token="very-secret")

    assert "very-secret" not in repr(config)


def test_exclude_patterns_accept_multiline_string() -> None:
    config = BackupConfig(roam_graph="g", exclude_title_patterns="/^a/\nb")

    assert config.exclude_title_patterns == ["/^a/", "b"]


def test_blank_status_aliases_fall_back_to_defaults() -> None:
    aliases = StatusAliases(active=" ", completed=" done ", deleted=None)

    assert aliases == StatusAliases(active="◼️", completed="done", deleted="❌")


def test_config_is_frozen() -> None:
    config = BackupConfig(roam_graph="g")

    with pytest.raises(ValidationError):
        config.page_prefix = "other"  # type: ignore[misc]
