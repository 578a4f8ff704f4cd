from __future__ import annotations

import argparse
import sys
from pathlib import Path

from archinstall import error, info

from .build_env import BuildEnvironmentPreparer
from .config import ManagerConfig, load_config
from .database import PackageDatabase, open_database
from .errors import DatabaseOpenError
from .kernel import CatalogSnapshot, Kernel
from .terminal import install_packages_command, remove_packages_command, run_build, run_in_terminal
from .transaction import TransactionCoordinator


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kernel-manager", description="Manage installed kernels and kernel builds")
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List available kernels")
    filters = list_cmd.add_mutually_exclusive_group()
    filters.add_argument("--installed", action="store_true", help="Only installed kernels")
    filters.add_argument("--updates", action="store_true", help="Only kernels with pending updates")

    install_cmd = sub.add_parser("install", help="Install kernels with their headers")
    install_cmd.add_argument("names", nargs="+")
    install_cmd.add_argument("--terminal", action="store_true", help="Run pacman in the privileged terminal helper instead")

    remove_cmd = sub.add_parser("remove", help="Remove kernels with their headers and modules")
    remove_cmd.add_argument("names", nargs="+")
    remove_cmd.add_argument("--terminal", action="store_true", help="Run pacman in the privileged terminal helper instead")

    sub.add_parser("prepare", help="Clone or refresh the kernel build recipes")

    build_cmd = sub.add_parser("build", help="Run a build command in the refreshed recipe checkout")
    build_cmd.add_argument("build_command")
    return parser


def list_kernels(db: PackageDatabase, config: ManagerConfig, installed_only: bool = False, updates_only: bool = False) -> int:
    snapshot = CatalogSnapshot(db, config.module_suffixes)
    kernels = snapshot.installed() if installed_only else snapshot.updates() if updates_only else snapshot.kernels
    for kernel in kernels:
        flags = []
        if kernel.is_installed():
            flags.append("installed")
        if kernel.update_available:
            flags.append("update")
        if kernel.headers is None:
            flags.append("no-headers")
        print(f"{kernel.name:<32} {kernel.version():<20} {kernel.category.value:<16} {kernel.repository:<12} {','.join(flags)}")
    return 0


def change_in_terminal(db: PackageDatabase, config: ManagerConfig, install: list[Kernel], remove: list[Kernel]) -> int:
    """Hand the change to pacman in the escalated terminal helper."""
    status = 0
    if remove:
        names = [pkg for kernel in remove for pkg in kernel.packages_for_removal(db)]
        status = run_in_terminal(remove_packages_command(names), True, config)
    if install and status == 0:
        names = [pkg for kernel in install for pkg in kernel.packages_for_install()]
        status = run_in_terminal(install_packages_command(names), True, config)
    return status


def change_kernels(db: PackageDatabase, config: ManagerConfig, install: list[str], remove: list[str], terminal: bool = False) -> int:
    snapshot = CatalogSnapshot(db, config.module_suffixes)
    for name in install + remove:
        if name not in snapshot:
            error(f"Unknown kernel: {name}")
            return 1
    if terminal:
        kernels = {kernel.name: kernel for kernel in snapshot}
        return change_in_terminal(db, config, [kernels[name] for name in install], [kernels[name] for name in remove])

    coordinator = TransactionCoordinator(db, config.module_suffixes)
    for name in install:
        coordinator.add_to_install_list(name)
    for name in remove:
        coordinator.add_to_removal_list(name)

    result = coordinator.commit()
    print(result.get_summary())
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    config = load_config([args.config]) if args.config else load_config()

    if args.command == "prepare":
        result = BuildEnvironmentPreparer.from_config(config).prepare()
        print(result.get_summary())
        return 0 if result.success else 1
    if args.command == "build":
        return run_build(args.build_command, config)

    try:
        db = open_database(config)
    except DatabaseOpenError as e:
        error(str(e))
        print(f"Cannot open package database: {e.message} (code {e.code})", file=sys.stderr)
        return 2

    try:
        if args.command == "list":
            return list_kernels(db, config, args.installed, args.updates)
        if args.command == "install":
            return change_kernels(db, config, args.names, [], args.terminal)
        return change_kernels(db, config, [], args.names, args.terminal)
    finally:
        db.close()
        info("Done")

