"""
Kernel catalog built from the package database.

Every call to build_catalog queries the database again, so a catalog always
reflects the database state at the time it was built. Nothing is cached
between builds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from archinstall import debug, info

from ..database.base import PackageDatabase, PackageRecord
from ..shared import HEADERS_SUFFIX, LOCAL_REPOSITORY
from .model import Kernel, headers_name_for, module_name_for

DEFAULT_MODULE_SUFFIXES: tuple[str, ...] = ("zfs", "nvidia", "nvidia-open")

# Packages in the linux namespace that are not kernels
NON_KERNEL_PACKAGES = frozenset({"linux-api-headers", "linux-docs", "linux-firmware", "linux-tools"})
NON_KERNEL_PREFIXES: tuple[str, ...] = ("linux-firmware-", "linux-tools-")
NON_KERNEL_SUFFIXES: tuple[str, ...] = (HEADERS_SUFFIX, "-docs")


def is_kernel_package_name(name: str, module_suffixes: Iterable[str] = DEFAULT_MODULE_SUFFIXES) -> bool:
    """Check whether a package name follows the kernel naming convention."""
    if name != "linux" and not name.startswith("linux-"):
        return False
    if name in NON_KERNEL_PACKAGES or name.startswith(NON_KERNEL_PREFIXES):
        return False
    if name.endswith(NON_KERNEL_SUFFIXES):
        return False
    return not any(name.endswith(f"-{suffix}") for suffix in module_suffixes)


def _resolve(db: PackageDatabase, name: str) -> PackageRecord | None:
    return db.find_sync(name) or db.find_local(name)


def _best_sync_version(db: PackageDatabase, name: str) -> str | None:
    best: str | None = None
    for repo in db.repositories():
        record = db.find_sync(name, repo)
        if record is None:
            continue
        if best is None or db.vercmp(record.version, best) > 0:
            best = record.version
    return best


def _make_kernel(db: PackageDatabase, package: PackageRecord, module_suffixes: Sequence[str]) -> Kernel:
    installed = db.find_local(package.name)
    headers = _resolve(db, headers_name_for(package.name))
    modules = tuple(record for suffix in module_suffixes if (record := _resolve(db, module_name_for(package.name, suffix))) is not None)

    update_available = False
    if installed is not None:
        best = _best_sync_version(db, package.name)
        update_available = best is not None and db.vercmp(best, installed.version) > 0

    return Kernel(
        name=package.name,
        repository=package.db_name,
        raw_identifier=package.base,
        installed_db=installed.db_name if installed is not None else "",
        update_available=update_available,
        package=package,
        headers=headers,
        installed=installed,
        modules=modules,
    )


def build_catalog(db: PackageDatabase, module_suffixes: Sequence[str] = DEFAULT_MODULE_SUFFIXES) -> list[Kernel]:
    """Enumerate every kernel package known to the database.

    Sync repositories are walked in search order and the first repository
    offering a kernel is recorded as its source. Installed kernels that no
    repository offers are appended with the local repository marker.

    Args:
        db: An opened package database
        module_suffixes: Suffixes of out-of-tree module packages to pair

    Returns:
        Kernels in discovery order
    """
    kernels: list[Kernel] = []
    seen: set[str] = set()

    for record in db.sync_packages():
        if record.name in seen or not is_kernel_package_name(record.name, module_suffixes):
            continue
        seen.add(record.name)
        kernels.append(_make_kernel(db, record, module_suffixes))

    for record in db.local_packages():
        if record.name in seen or not is_kernel_package_name(record.name, module_suffixes):
            continue
        seen.add(record.name)
        debug(f"Kernel {record.name} is installed but not offered by any repository")
        local = PackageRecord(name=record.name, version=record.version, db_name=LOCAL_REPOSITORY, base=record.base, handle=record.handle)
        kernels.append(_make_kernel(db, local, module_suffixes))

    info(f"Found {len(kernels)} kernels, {sum(k.is_installed() for k in kernels)} installed")
    return kernels


class CatalogSnapshot:
    """Kernels of one catalog build together with the database they borrow from.

    Discard the snapshot (and build a new one) after the database changes.
    """

    def __init__(self, db: PackageDatabase, module_suffixes: Sequence[str] = DEFAULT_MODULE_SUFFIXES) -> None:
        self.db = db
        self.kernels = build_catalog(db, module_suffixes)
        self._by_name = {kernel.name: kernel for kernel in self.kernels}

    def find(self, name: str) -> Kernel | None:
        return self._by_name.get(name)

    def installed(self) -> list[Kernel]:
        return [k for k in self.kernels if k.is_installed()]

    def updates(self) -> list[Kernel]:
        return [k for k in self.kernels if k.update_available]

    def __iter__(self) -> Iterator[Kernel]:
        return iter(self.kernels)

    def __len__(self) -> int:
        return len(self.kernels)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
