from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from archinstall import debug, info, warn
from pydantic import BaseModel, ValidationError, field_validator

from .utils import expand_home

DEFAULT_CONFIG_PATHS = [Path("/etc/kernel-manager/config.json"), Path.home() / ".config" / "kernel-manager" / "config.json"]


class ManagerConfig(BaseModel):
    """Settings for the package database, recipe checkout and build helpers."""

    # Package database
    root_dir: str = "/"
    db_path: str = "/var/lib/pacman/"
    pacman_conf: str = "/etc/pacman.conf"

    # Build recipes
    cache_dir: str = "~/.cache/kernel-manager"
    recipes_dirname: str = "pkgbuilds"
    recipes_url: str = "https://github.com/cachyos/linux-cachyos.git"
    recipes_branch: str = "master"
    build_environment: str = ""  # NAME=VALUE lines applied before each build

    # Privileged helpers
    terminal_helper: str = "/usr/lib/kernel-manager/terminal-helper"
    root_shell: str = "/usr/lib/kernel-manager/rootshell.sh"
    escalation_command: str = "pkexec"

    module_suffixes: list[str] = ["zfs", "nvidia", "nvidia-open"]

    @field_validator("recipes_branch")
    @classmethod
    def _validate_branch(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Recipe branch cannot be empty")
        return v

    @field_validator("recipes_dirname")
    @classmethod
    def _validate_dirname(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError("Recipe directory name must be a single non-empty path component")
        return v

    @property
    def cache_path(self) -> Path:
        return expand_home(self.cache_dir)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ManagerConfig:
        return cls.model_validate(data)


def load_config(paths: list[Path] | None = None) -> ManagerConfig:
    """Merge the JSON config files in order; later files win.

    Missing files are skipped. Unreadable or invalid files are reported and
    skipped so a broken user file never prevents startup.
    """
    merged: dict[str, Any] = {}
    for path in DEFAULT_CONFIG_PATHS if paths is None else paths:
        if not path.exists():
            debug(f"Config file not found: {path}")
            continue
        try:
            data = json.loads(path.read_text())
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            ManagerConfig.from_json({**merged, **data})
        except (OSError, ValueError, ValidationError) as e:
            warn(f"Failed to load config from {path}: {e}")
            continue
        merged.update(data)
        info(f"Loaded config from {path}")
    return ManagerConfig.from_json(merged)


def save_config(config: ManagerConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_json(), indent=2))
    info(f"Saved config to {path}")
