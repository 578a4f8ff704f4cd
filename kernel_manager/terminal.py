"""
Terminal helper invocation for privileged package operations and builds.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import TYPE_CHECKING

from archinstall import error, info

from .build_env import BuildEnvironmentPreparer
from .environment import EnvironmentScope, get_environment_scope

if TYPE_CHECKING:
    from .config import ManagerConfig
    from .worker import CancellationToken


def build_terminal_command(cmd: str, escalate: bool, config: ManagerConfig) -> list[str]:
    """Argument vector for running cmd in the terminal helper.

    With escalate the helper runs the command through the root shell wrapped
    in the escalation command.
    """
    argv = [config.terminal_helper]
    if escalate:
        argv += ["-s", f"{config.escalation_command} {config.root_shell}"]
    argv.append(f"{cmd}; read -p 'Press enter to exit'")
    return argv


def run_in_terminal(cmd: str, escalate: bool, config: ManagerConfig, cwd: str | None = None) -> int:
    """Run cmd in the terminal helper and return its exit code."""
    argv = build_terminal_command(cmd, escalate, config)
    info(f"Running in terminal: {cmd}")
    try:
        # Ruff S603: the helper path comes from the manager configuration
        proc = subprocess.run(argv, check=False, cwd=cwd)  # noqa: S603
    except OSError as e:
        error(f"Cannot start terminal helper {config.terminal_helper}: {e}")
        return 127
    return proc.returncode


def install_packages_command(names: list[str]) -> str:
    return f"pacman -S --needed {' '.join(shlex.quote(n) for n in names)}"


def remove_packages_command(names: list[str]) -> str:
    return f"pacman -Rsn {' '.join(shlex.quote(n) for n in names)}"


def run_build(
    command: str,
    config: ManagerConfig,
    scope: EnvironmentScope | None = None,
    preparer: BuildEnvironmentPreparer | None = None,
    cancel: CancellationToken | None = None,
) -> int:
    """Refresh the recipe checkout, scope the environment, run the build.

    Returns:
        The build's exit code, or 1 if the checkout could not be prepared
    """
    preparer = preparer or BuildEnvironmentPreparer.from_config(config)
    result = preparer.prepare(cancel=cancel)
    if not result.success:
        error(f"Not building: {result.get_summary()}")
        return 1
    if cancel is not None and cancel.cancelled:
        return 1

    (scope or get_environment_scope()).apply(config.build_environment)
    return run_in_terminal(command, False, config, cwd=str(result.path))
