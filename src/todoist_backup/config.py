"""Configuration loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from todoist_backup.contracts.config import BackupConfig
from todoist_backup.contracts.exceptions import ConfigError


def _resolve_path(value: Path | None, *, base_dir: Path) -> Path | None:
    if value is None:
        return None
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def _read_patterns(path: Path) -> list[str]:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigError(f"failed reading exclude patterns file: {path}") from exc
    return [line for line in lines if line.strip()]


def load_config(path: str | Path) -> BackupConfig:
    """Load and validate config from JSON, resolving relative paths against the config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = BackupConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    patterns_file = _resolve_path(parsed.exclude_patterns_file, base_dir=config_dir)
    if patterns_file is None:
        return parsed
    return parsed.model_copy(
        update={
            "exclude_patterns_file": patterns_file,
            "exclude_title_patterns": [*parsed.exclude_title_patterns, *_read_patterns(patterns_file)],
        }
    )
