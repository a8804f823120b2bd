"""Configuration loading and runtime bootstrapping."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from dependency_engine.models import DEFAULT_DURATION_MINUTES, DependencyPolicy

CONFIG_DIR_ENV = "TGM_CONFIG_DIR"


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


def config_dir(root: Path) -> Path:
    """Config directory, overridable through ``TGM_CONFIG_DIR``."""
    override = os.environ.get(CONFIG_DIR_ENV)
    return Path(override) if override else root / "config"


def load_effective_config(root: Path) -> dict[str, Any]:
    """Defaults from ``default.yaml`` with ``local.yaml`` merged on top."""
    directory = config_dir(root)
    default_cfg = load_yaml(directory / "default.yaml")
    local_cfg = load_yaml(directory / "local.yaml")
    return merge_dicts(default_cfg, local_cfg)


def ensure_runtime_dirs(root: Path, config: dict[str, Any]) -> dict[str, Path]:
    """Resolve database and audit log paths and create their directories."""
    paths_cfg = config.get("paths", {})
    db_path = (root / paths_cfg.get("db_path", "workspace/tasks.db")).resolve()
    audit_log_path = (root / paths_cfg.get("audit_log_path", "logs/audit.jsonl")).resolve()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    audit_log_path.parent.mkdir(parents=True, exist_ok=True)

    return {
        "db_path": db_path,
        "audit_log_path": audit_log_path,
    }


def dependency_policy_from_config(config: dict[str, Any]) -> DependencyPolicy:
    """Build the engine policy from the ``dependencies`` section."""
    deps_cfg = config.get("dependencies", {}) or {}
    max_deps = deps_cfg.get("max_dependencies")
    return DependencyPolicy(
        max_dependencies=int(max_deps) if max_deps is not None else None,
        default_duration=int(deps_cfg.get("default_duration", DEFAULT_DURATION_MINUTES)),
        bottleneck_threshold=int(deps_cfg.get("bottleneck_threshold", 3)),
    )
