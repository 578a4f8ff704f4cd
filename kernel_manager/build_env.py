"""
Preparation of the build recipe checkout.

The recipe repository is cloned into the cache directory once and refreshed
before every build: forced checkout of the expected branch, removal of
untracked files, pull. A checkout directory without git metadata is a broken
leftover and is wiped and cloned again.

All steps run even when an earlier one fails; a failed pull still leaves a
clean tree on the expected branch. Failures are reported once at the end.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from archinstall import debug, error, info, warn
from archinstall.lib.exceptions import SysCallError
from archinstall.lib.general import SysCommand

if TYPE_CHECKING:
    from .config import ManagerConfig
    from .worker import CancellationToken

CommandRunner = Callable[[str], int]

DEFAULT_RECIPES_URL = "https://github.com/cachyos/linux-cachyos.git"


def run_command(cmd: str) -> int:
    """Run a shell command and return its exit code."""
    debug(f"Running: {cmd}")
    try:
        SysCommand(cmd, peek_output=True)
    except SysCallError as e:
        return e.exit_code if e.exit_code is not None else 1
    return 0


@dataclass
class StepResult:
    name: str
    command: str
    exit_code: int = 0
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class PreparationResult:
    """Per-step outcome of a checkout preparation."""

    path: Path
    steps: list[StepResult] = field(default_factory=list)
    repaired: bool = False
    cancelled: bool = False

    @property
    def failed_steps(self) -> list[StepResult]:
        return [step for step in self.steps if not step.ok]

    @property
    def success(self) -> bool:
        return not self.cancelled and not self.failed_steps

    def get_summary(self) -> str:
        if self.cancelled:
            return f"Preparation of {self.path} cancelled"
        if self.success:
            return f"Build recipes ready at {self.path}"
        failed = ", ".join(f"{s.name} (exit {s.exit_code})" for s in self.failed_steps)
        return f"Preparation of {self.path} failed: {failed}"


class BuildEnvironmentPreparer:
    def __init__(
        self,
        cache_dir: Path,
        recipes_dirname: str = "pkgbuilds",
        recipes_url: str = DEFAULT_RECIPES_URL,
        branch: str = "master",
        runner: CommandRunner | None = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.recipes_dirname = recipes_dirname
        self.recipes_url = recipes_url
        self.branch = branch
        self.runner = runner or run_command

    @classmethod
    def from_config(cls, config: ManagerConfig, runner: CommandRunner | None = None) -> BuildEnvironmentPreparer:
        return cls(config.cache_path, config.recipes_dirname, config.recipes_url, config.recipes_branch, runner)

    @property
    def checkout_path(self) -> Path:
        return self.cache_dir / self.recipes_dirname

    def _is_broken_checkout(self) -> bool:
        return self.checkout_path.exists() and not (self.checkout_path / ".git").exists()

    def _run_step(self, result: PreparationResult, name: str, cmd: str, cancel: CancellationToken | None) -> bool:
        if cancel is not None and cancel.cancelled:
            warn(f"Preparation cancelled before {name}")
            result.cancelled = True
            return False
        exit_code = self.runner(cmd)
        if exit_code != 0:
            warn(f"Step {name} exited with {exit_code}")
        result.steps.append(StepResult(name, cmd, exit_code))
        return True

    def prepare(self, cancel: CancellationToken | None = None) -> PreparationResult:
        """Make sure an up-to-date recipe checkout exists.

        Args:
            cancel: Checked before every external step

        Returns:
            PreparationResult with one StepResult per external command
        """
        result = PreparationResult(path=self.checkout_path)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        os.chdir(self.cache_dir)

        if self._is_broken_checkout():
            warn(f"{self.checkout_path} has no git metadata, removing it")
            shutil.rmtree(self.checkout_path)
            result.repaired = True

        if not self.checkout_path.exists():
            info(f"Cloning {self.recipes_url} into {self.checkout_path}")
            if not self._run_step(result, "clone", f"git clone {self.recipes_url} {self.recipes_dirname}", cancel):
                return result

        refresh_steps = (
            ("checkout", f"git checkout --force {self.branch}"),
            ("clean", "git clean -fd"),
            ("pull", "git pull"),
        )
        if self.checkout_path.is_dir():
            os.chdir(self.checkout_path)
            for name, cmd in refresh_steps:
                if not self._run_step(result, name, cmd, cancel):
                    return result
        else:
            # never run git clean outside the checkout
            error(f"{self.checkout_path} does not exist after clone")
            result.steps.extend(StepResult(name, cmd, exit_code=1, skipped=True) for name, cmd in refresh_steps)

        if result.success:
            info(result.get_summary())
        else:
            error(result.get_summary())
        return result
