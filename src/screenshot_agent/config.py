"""Configuration management for Screenshot Agent.

Configuration priority (highest to lowest):
1. CLI overrides (passed to load_config)
2. Environment variables (SCREENSHOT_AGENT_*)
3. Config file (~/.config/screenshot-agent/config.yaml)
4. Built-in defaults
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any

import yaml
from platformdirs import user_config_dir

log = logging.getLogger(__name__)

ENV_PREFIX = "SCREENSHOT_AGENT"
CONFIG_DIR = Path(user_config_dir("screenshot-agent"))
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"

DEFAULT_FRESHNESS_SECONDS = 30
DEFAULT_MAX_CLIPBOARD_BYTES = 64 * 1024 * 1024
DEFAULT_TRASH_MAX_ATTEMPTS = 10000


@dataclass
class Config:
    """Screenshot agent configuration."""

    # Arbitration
    freshness_seconds: int = DEFAULT_FRESHNESS_SECONDS

    # Limits
    max_clipboard_bytes: int = DEFAULT_MAX_CLIPBOARD_BYTES  # 0 = unbounded
    trash_max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS

    # Paths
    temp_dir: Optional[Path] = None  # None = system temp dir
    hooks_dir: Optional[Path] = field(default_factory=lambda: CONFIG_DIR / "hooks")

    # Structured events on stderr
    emit_events: bool = False

    def __post_init__(self):
        if isinstance(self.temp_dir, str):
            self.temp_dir = Path(self.temp_dir)
        if isinstance(self.hooks_dir, str):
            self.hooks_dir = Path(self.hooks_dir)


PATH_KEYS = {"temp_dir", "hooks_dir"}
INT_KEYS = {"freshness_seconds", "max_clipboard_bytes", "trash_max_attempts"}


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}_{name}")


def _config_path_from_env() -> Optional[Path]:
    value = _env("CONFIG") or _env("CONFIG_PATH")
    if value:
        return Path(value).expanduser()
    return None


def _load_config_file(path: Path, strict: bool = False) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        if strict:
            raise ValueError(f"Failed to parse config file {path}: {exc}")
        return {}

    if not isinstance(data, dict):
        if strict:
            raise ValueError(f"Config file {path} must be a mapping")
        return {}

    return data


def _expand_path(value: Any) -> Any:
    if value is None:
        return value
    return str(Path(value).expanduser())


def config_defaults() -> dict:
    return {
        "freshness_seconds": DEFAULT_FRESHNESS_SECONDS,
        "max_clipboard_bytes": DEFAULT_MAX_CLIPBOARD_BYTES,
        "trash_max_attempts": DEFAULT_TRASH_MAX_ATTEMPTS,
        "temp_dir": None,
        "hooks_dir": str(CONFIG_DIR / "hooks"),
        "emit_events": False,
    }


def _load_env_overrides() -> dict:
    config: dict[str, Any] = {}

    mapping = {
        "FRESHNESS_SECONDS": "freshness_seconds",
        "MAX_CLIPBOARD_BYTES": "max_clipboard_bytes",
        "TRASH_MAX_ATTEMPTS": "trash_max_attempts",
        "TEMP_DIR": "temp_dir",
        "HOOKS_DIR": "hooks_dir",
    }

    for env_name, key in mapping.items():
        value = _env(env_name)
        if value is None:
            continue
        if key in PATH_KEYS:
            config[key] = _expand_path(value)
        elif key in INT_KEYS:
            try:
                config[key] = int(value)
            except ValueError:
                continue

    value = _env("EMIT_EVENTS")
    if value is not None:
        config["emit_events"] = value.lower() in ("true", "1", "yes", "on")

    return config


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    return config_path or _config_path_from_env() or DEFAULT_CONFIG_PATH


def _valid_file_values(file_config: dict, path: Path, strict: bool = False) -> dict:
    """Keep only file values that pass validation; warn about the rest."""
    valid = {}
    for key, value in file_config.items():
        errors = validate_config_dict({key: value})
        if errors:
            if strict:
                raise ValueError(f"Invalid config file {path}: {'; '.join(errors)}")
            for error in errors:
                log.warning("Ignoring config value in %s: %s", path, error)
            continue
        valid[key] = value
    return valid


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict] = None,
    strict: bool = False,
) -> Config:
    """Load configuration from all sources."""
    resolved_path = resolve_config_path(config_path)

    config_dict = config_defaults()
    file_config = _load_config_file(resolved_path, strict=strict)
    config_dict.update(_valid_file_values(file_config, resolved_path, strict))
    config_dict.update(_load_env_overrides())

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

    for key in PATH_KEYS:
        if key in config_dict and config_dict[key] is not None:
            config_dict[key] = _expand_path(config_dict[key])

    return Config(**config_dict)


def config_schema() -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "freshness_seconds": {"type": "integer", "minimum": 0},
            "max_clipboard_bytes": {"type": "integer", "minimum": 0},
            "trash_max_attempts": {"type": "integer", "minimum": 1},
            "temp_dir": {"type": ["string", "null"]},
            "hooks_dir": {"type": ["string", "null"]},
            "emit_events": {"type": "boolean"},
        },
        "additionalProperties": False,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    props = config_schema()["properties"]

    for key in data.keys():
        if key not in props:
            errors.append(f"Unknown config key: {key}")

    for key, value in data.items():
        if key not in props:
            continue
        spec = props[key]
        expected = spec.get("type")
        if isinstance(expected, list):
            if value is None and "null" in expected:
                continue
            if "string" in expected and isinstance(value, str):
                continue
            errors.append(f"{key} must be one of types: {', '.join(expected)}")
            continue

        if expected == "integer":
            if not _is_int(value):
                errors.append(f"{key} must be an integer")
            elif value < spec["minimum"]:
                errors.append(f"{key} must be >= {spec['minimum']}")
        elif expected == "boolean" and not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    path = resolve_config_path(config_path)
    if not path.exists():
        return []
    try:
        data = _load_config_file(path, strict=True)
    except ValueError as exc:
        return [str(exc)]
    return validate_config_dict(data)


def config_to_dict(config: Config) -> dict:
    def _format(value: Any) -> Any:
        if isinstance(value, Path):
            return str(value)
        return value

    return {
        "freshness_seconds": config.freshness_seconds,
        "max_clipboard_bytes": config.max_clipboard_bytes,
        "trash_max_attempts": config.trash_max_attempts,
        "temp_dir": _format(config.temp_dir),
        "hooks_dir": _format(config.hooks_dir),
        "emit_events": config.emit_events,
    }
