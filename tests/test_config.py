"""
Tests for the manager configuration.
"""

import json
from pathlib import Path

import pytest
from kernel_manager.config import ManagerConfig, load_config, save_config
from pydantic import ValidationError


class TestManagerConfig:
    """Test defaults and validation."""

    def test_defaults(self) -> None:
        """Test the defaults."""
        config = ManagerConfig()
        assert config.root_dir == "/"
        assert config.db_path == "/var/lib/pacman/"
        assert config.recipes_branch == "master"
        assert config.cache_path == Path.home() / ".cache" / "kernel-manager"

    def test_empty_branch_rejected(self) -> None:
        """Test a blank branch is rejected."""
        with pytest.raises(ValidationError, match="Recipe branch cannot be empty"):
            ManagerConfig(recipes_branch=" ")

    def test_nested_dirname_rejected(self) -> None:
        """Test the recipe directory must be one path component."""
        with pytest.raises(ValidationError, match="single non-empty path component"):
            ManagerConfig(recipes_dirname="a/b")

    def test_json_round_trip(self) -> None:
        """Test JSON export and import."""
        config = ManagerConfig(cache_dir="/var/cache/km", build_environment="CC=clang")
        assert ManagerConfig.from_json(config.to_json()) == config


class TestLoadConfig:
    """Test merging config files."""

    def test_missing_files_give_defaults(self, tmp_path: Path) -> None:
        """Test missing files give the defaults."""
        assert load_config([tmp_path / "nope.json"]) == ManagerConfig()

    def test_later_file_wins(self, tmp_path: Path) -> None:
        """Test later files override earlier ones."""
        system = tmp_path / "system.json"
        user = tmp_path / "user.json"
        system.write_text(json.dumps({"recipes_branch": "stable", "cache_dir": "/srv/km"}))
        user.write_text(json.dumps({"recipes_branch": "testing"}))

        config = load_config([system, user])

        assert config.recipes_branch == "testing"
        assert config.cache_dir == "/srv/km"

    def test_invalid_file_skipped(self, tmp_path: Path) -> None:
        """Test an invalid file is skipped."""
        good = tmp_path / "good.json"
        bad = tmp_path / "bad.json"
        invalid = tmp_path / "invalid.json"
        good.write_text(json.dumps({"escalation_command": "sudo"}))
        bad.write_text("{not json")
        invalid.write_text(json.dumps({"recipes_dirname": "x/y"}))

        config = load_config([good, bad, invalid])

        assert config.escalation_command == "sudo"
        assert config.recipes_dirname == "pkgbuilds"

    def test_save_then_load(self, tmp_path: Path) -> None:
        """Test a saved config loads back."""
        path = tmp_path / "nested" / "config.json"
        save_config(ManagerConfig(terminal_helper="/opt/helper"), path)
        assert load_config([path]).terminal_helper == "/opt/helper"
