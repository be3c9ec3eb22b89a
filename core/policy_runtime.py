"""Configuration loading and logging bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {"db_path": "workspace/rp.db"},
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    },
    "schedule": {"default_dependency_type": "FS"},
}

ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "RP_DB_PATH": ("paths", "db_path"),
    "RP_LOG_LEVEL": ("logging", "level"),
}


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides(environ: dict[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name, (section, key) in ENV_OVERRIDES.items():
        if environ.get(name):
            overrides.setdefault(section, {})[key] = environ[name]
    return overrides


def load_effective_config(
    root: Path, environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """Merge built-in defaults, config/default.yaml, config/local.yaml and env."""
    config_dir = root / "config"
    merged = merge_dicts(DEFAULT_CONFIG, load_yaml(config_dir / "default.yaml"))
    merged = merge_dicts(merged, load_yaml(config_dir / "local.yaml"))
    env = dict(os.environ) if environ is None else environ
    return merge_dicts(merged, _env_overrides(env))


def ensure_runtime_dirs(root: Path, config: dict[str, Any]) -> dict[str, Path]:
    """Resolve the database path against ``root`` and create its directory."""
    db_path = Path(config.get("paths", {}).get("db_path", "workspace/rp.db"))
    if not db_path.is_absolute():
        db_path = root / db_path
    db_path = db_path.resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return {"db_path": db_path}


def configure_logging(config: dict[str, Any]) -> None:
    """Apply the configured level and format to the ``rp`` logger tree."""
    log_cfg = config.get("logging", {})
    level = str(log_cfg.get("level", "WARNING")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level}")
    logger = logging.getLogger("rp")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(log_cfg.get("format")))
        logger.addHandler(handler)
