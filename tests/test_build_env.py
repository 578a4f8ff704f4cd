"""
Tests for preparing the build recipe checkout.
"""

import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from archinstall.lib.exceptions import SysCallError
from kernel_manager.build_env import BuildEnvironmentPreparer, PreparationResult, StepResult, run_command
from kernel_manager.config import ManagerConfig
from kernel_manager.worker import CancellationToken


class FakeGit:
    """Records commands; a clone creates the checkout with git metadata."""

    def __init__(self, failing: set[str] | None = None, clone_creates: bool = True) -> None:
        self.commands: list[tuple[str, str]] = []
        self.failing = failing or set()
        self.clone_creates = clone_creates

    def __call__(self, cmd: str) -> int:
        self.commands.append((cmd, os.getcwd()))
        verb = cmd.split()[1]
        if verb == "clone" and self.clone_creates:
            target = Path(cmd.split()[-1])
            (target / ".git").mkdir(parents=True)
        return 1 if verb in self.failing else 0

    @property
    def verbs(self) -> list[str]:
        return [cmd.split()[1] for cmd, _ in self.commands]


@pytest.fixture(autouse=True)
def _restore_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


class TestPrepare:
    """Test the preparation sequence."""

    def test_fresh_clone(self, tmp_path: Path) -> None:
        """Test an empty cache is cloned and refreshed."""
        git = FakeGit()
        cache = tmp_path / "cache"
        result = BuildEnvironmentPreparer(cache, runner=git).prepare()

        assert result.success
        assert result.path == cache / "pkgbuilds"
        assert git.verbs == ["clone", "checkout", "clean", "pull"]
        assert git.commands[0][0] == "git clone https://github.com/cachyos/linux-cachyos.git pkgbuilds"
        assert Path(git.commands[0][1]).resolve() == cache.resolve()
        assert all(Path(cwd).resolve() == (cache / "pkgbuilds").resolve() for _, cwd in git.commands[1:])
        assert git.commands[1][0] == "git checkout --force master"

    def test_existing_checkout_is_refreshed(self, tmp_path: Path) -> None:
        """Test an existing checkout is refreshed without cloning."""
        (tmp_path / "pkgbuilds" / ".git").mkdir(parents=True)
        git = FakeGit()
        result = BuildEnvironmentPreparer(tmp_path, runner=git).prepare()

        assert result.success
        assert not result.repaired
        assert git.verbs == ["checkout", "clean", "pull"]

    def test_checkout_without_git_metadata_is_recloned(self, tmp_path: Path) -> None:
        """Test a broken checkout is removed and cloned again."""
        checkout = tmp_path / "pkgbuilds"
        checkout.mkdir()
        (checkout / "PKGBUILD").write_text("pkgname=linux-broken\n")
        git = FakeGit()

        result = BuildEnvironmentPreparer(tmp_path, runner=git).prepare()

        assert result.repaired
        assert git.verbs == ["clone", "checkout", "clean", "pull"]
        assert not (checkout / "PKGBUILD").exists()
        assert (checkout / ".git").is_dir()

    def test_failed_pull_still_runs_all_steps(self, tmp_path: Path) -> None:
        """Test a failed pull is reported after all steps ran."""
        git = FakeGit(failing={"checkout", "pull"})
        result = BuildEnvironmentPreparer(tmp_path, runner=git).prepare()

        assert not result.success
        assert git.verbs == ["clone", "checkout", "clean", "pull"]
        assert [s.name for s in result.failed_steps] == ["checkout", "pull"]
        assert "checkout (exit 1)" in result.get_summary()

    def test_failed_clone_skips_git_outside_checkout(self, tmp_path: Path) -> None:
        """Test refresh steps are skipped when the clone left nothing."""
        git = FakeGit(failing={"clone"}, clone_creates=False)
        result = BuildEnvironmentPreparer(tmp_path, runner=git).prepare()

        assert not result.success
        assert git.verbs == ["clone"]
        assert [s.name for s in result.steps] == ["clone", "checkout", "clean", "pull"]
        assert all(s.skipped for s in result.steps[1:])

    def test_cache_dir_created(self, tmp_path: Path) -> None:
        """Test the cache directory is created."""
        cache = tmp_path / "a" / "b"
        BuildEnvironmentPreparer(cache, runner=FakeGit()).prepare()
        assert cache.is_dir()

    def test_cancel_stops_before_next_step(self, tmp_path: Path) -> None:
        """Test cancellation stops before the next step."""
        token = CancellationToken()
        git = FakeGit()

        def cancelling(cmd: str) -> int:
            code = git(cmd)
            if cmd.startswith("git checkout"):
                token.cancel()
            return code

        result = BuildEnvironmentPreparer(tmp_path, runner=cancelling).prepare(cancel=token)

        assert result.cancelled
        assert not result.success
        assert git.verbs == ["clone", "checkout"]

    def test_from_config(self, tmp_path: Path) -> None:
        """Test building a preparer from the config."""
        config = ManagerConfig(cache_dir=str(tmp_path), recipes_dirname="recipes", recipes_branch="stable", recipes_url="https://example.invalid/r.git")
        git = FakeGit()
        result = BuildEnvironmentPreparer.from_config(config, runner=git).prepare()

        assert result.path == tmp_path / "recipes"
        assert git.commands[0][0] == "git clone https://example.invalid/r.git recipes"
        assert git.commands[1][0] == "git checkout --force stable"


class TestRunCommand:
    """Test the SysCommand based runner."""

    @patch("kernel_manager.build_env.SysCommand")
    def test_success(self, mock_syscmd: Mock) -> None:
        """Test a successful command returns 0."""
        assert run_command("git pull") == 0
        mock_syscmd.assert_called_once_with("git pull", peek_output=True)

    @patch("kernel_manager.build_env.SysCommand")
    def test_failure_exit_code(self, mock_syscmd: Mock) -> None:
        """Test a failing command returns its exit code."""
        mock_syscmd.side_effect = SysCallError("failed", exit_code=128)
        assert run_command("git pull") == 128


class TestPreparationResult:
    """Test result aggregation."""

    def test_success_requires_all_steps(self) -> None:
        """Test success needs every step to pass."""
        result = PreparationResult(path=Path("/tmp/x"), steps=[StepResult("clone", "git clone", 0), StepResult("pull", "git pull", 1)])
        assert not result.success
        assert result.failed_steps == [result.steps[1]]
