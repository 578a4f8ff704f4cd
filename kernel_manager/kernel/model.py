"""
Kernel entity.

A Kernel pairs a kernel package with its headers and out-of-tree module
packages as found in one catalog build. The PackageRecords it holds are
borrowed from the database the catalog was built from and must not be used
after that database is closed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

from ..database.base import PackageDatabase, PackageRecord
from ..shared import HEADERS_SUFFIX, LOCAL_REPOSITORY, KernelCategory
from .classifier import classify


def headers_name_for(kernel_name: str) -> str:
    return f"{kernel_name}{HEADERS_SUFFIX}"


def module_name_for(kernel_name: str, suffix: str) -> str:
    return f"{kernel_name}-{suffix}"


@dataclass(eq=False)
class Kernel:
    """One installable kernel variant."""

    name: str
    repository: str = LOCAL_REPOSITORY
    raw_identifier: str = ""
    installed_db: str = ""
    update_available: bool = False
    package: PackageRecord | None = field(default=None, repr=False)
    headers: PackageRecord | None = field(default=None, repr=False)
    installed: PackageRecord | None = field(default=None, repr=False)
    modules: tuple[PackageRecord, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Kernel name cannot be empty")

    @cached_property
    def category(self) -> KernelCategory:
        return classify(self.name)

    @property
    def headers_name(self) -> str:
        return headers_name_for(self.name)

    def is_installed(self) -> bool:
        return self.installed is not None

    def version(self) -> str:
        """Installed version if installed, otherwise the available version."""
        if self.installed is not None:
            return self.installed.version
        if self.package is not None:
            return self.package.version
        return ""

    def is_available(self) -> bool:
        """Whether a sync repository offers the kernel."""
        return self.repository != LOCAL_REPOSITORY

    def packages_for_install(self) -> list[str]:
        """Package names staged when the kernel is installed.

        Headers are included only when a sync repository offers them.
        """
        names = [self.name]
        if self.headers is not None and self.headers.db_name != LOCAL_REPOSITORY:
            names.append(self.headers.name)
        return names

    def packages_for_removal(self, db: PackageDatabase) -> list[str]:
        """Package names staged when the kernel is removed.

        The kernel plus whichever of its headers and module packages are
        currently installed, so no module is left behind for a missing kernel.
        """
        names = [self.name]
        for extra in (self.headers_name, *(module.name for module in self.modules)):
            if db.find_local(extra) is not None:
                names.append(extra)
        return names

    def __str__(self) -> str:
        status = " [installed]" if self.is_installed() else ""
        update = " [update]" if self.update_available else ""
        return f"{self.name} {self.version()} ({self.category}) from {self.repository}{status}{update}"
