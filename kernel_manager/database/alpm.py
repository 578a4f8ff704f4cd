"""
libalpm-backed package database, via pyalpm.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from archinstall import debug, info, warn

from ..errors import DatabaseOpenError, TransactionError
from .base import PackageRecord

if TYPE_CHECKING:
    from ..config import ManagerConfig


def _error_code(exc: BaseException) -> int | None:
    # pyalpm errors carry (message, errno, extra)
    if len(exc.args) > 1 and isinstance(exc.args[1], int):
        return exc.args[1]
    return None


def _to_record(pkg: Any) -> PackageRecord:
    return PackageRecord(name=pkg.name, version=pkg.version, db_name=pkg.db.name, base=pkg.base or "", handle=pkg)


class AlpmTransaction:
    """Thin wrapper translating pyalpm errors into TransactionError."""

    def __init__(self, trans: Any, alpm_error: type[Exception]) -> None:
        self._trans = trans
        self._alpm_error = alpm_error
        self._released = False

    def _call(self, stage: str, func: Any, *args: Any) -> None:
        try:
            func(*args)
        except self._alpm_error as e:
            raise TransactionError(stage, str(e)) from e

    def add_package(self, record: PackageRecord) -> None:
        self._call("stage", self._trans.add_pkg, record.handle)

    def remove_package(self, record: PackageRecord) -> None:
        self._call("stage", self._trans.remove_pkg, record.handle)

    def prepare(self) -> None:
        self._call("prepare", self._trans.prepare)

    def commit(self) -> None:
        self._call("commit", self._trans.commit)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._call("release", self._trans.release)


class AlpmDatabase:
    """Package database opened against a root and a database path.

    Sync databases are registered in the order pacman.conf lists them, which is
    the search order used for repository attribution.
    """

    def __init__(self, handle: Any, alpm_module: Any) -> None:
        self._handle = handle
        self._alpm = alpm_module

    @classmethod
    def open(cls, root: str, db_path: str, pacman_conf: str | None = None) -> AlpmDatabase:
        """Open a libalpm handle and register the configured sync databases.

        With a pacman.conf the handle is set up by pycman exactly as pacman
        would set it up (architecture, cache and gpg directories, log file,
        per-repository SigLevel and servers), with RootDir and DBPath taken from
        the arguments.

        Raises:
            DatabaseOpenError: If the configuration cannot be read or the handle cannot be opened
        """
        import pyalpm
        from pycman import config as pycman_config

        debug(f"Opening package database root={root} dbpath={db_path}")
        try:
            if pacman_conf:
                conf = pycman_config.PacmanConfig(conf=pacman_conf)
                conf.options["RootDir"] = root
                conf.options["DBPath"] = db_path
                handle = conf.initialize_alpm()
            else:
                handle = pyalpm.Handle(root, db_path)
        except pyalpm.error as e:
            raise DatabaseOpenError(f"Cannot open package database at {db_path}: {e}", _error_code(e)) from e
        except OSError as e:
            raise DatabaseOpenError(f"Cannot read {pacman_conf}: {e}", e.errno) from e

        info(f"Opened package database with repositories: {', '.join(db.name for db in handle.get_syncdbs())}")
        return cls(handle, pyalpm)

    @property
    def handle(self) -> Any:
        if self._handle is None:
            raise DatabaseOpenError("Package database handle is already released")
        return self._handle

    def repositories(self) -> list[str]:
        return [db.name for db in self.handle.get_syncdbs()]

    def find_local(self, name: str) -> PackageRecord | None:
        pkg = self.handle.get_localdb().get_pkg(name)
        return _to_record(pkg) if pkg is not None else None

    def find_sync(self, name: str, repository: str | None = None) -> PackageRecord | None:
        for db in self.handle.get_syncdbs():
            if repository is not None and db.name != repository:
                continue
            pkg = db.get_pkg(name)
            if pkg is not None:
                return _to_record(pkg)
        return None

    def sync_packages(self) -> Iterator[PackageRecord]:
        for db in self.handle.get_syncdbs():
            for pkg in db.pkgcache:
                yield _to_record(pkg)

    def local_packages(self) -> Iterator[PackageRecord]:
        for pkg in self.handle.get_localdb().pkgcache:
            yield _to_record(pkg)

    def vercmp(self, a: str, b: str) -> int:
        return int(self._alpm.vercmp(a, b))

    def begin_transaction(self) -> AlpmTransaction:
        try:
            trans = self.handle.init_transaction()
        except self._alpm.error as e:
            raise TransactionError("init", str(e)) from e
        return AlpmTransaction(trans, self._alpm.error)

    def close(self) -> None:
        if self._handle is None:
            warn("Package database handle released twice")
            return
        debug("Releasing package database handle")
        self._handle = None

    def __enter__(self) -> AlpmDatabase:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def open_database(config: ManagerConfig) -> AlpmDatabase:
    """Open the package database described by the manager configuration."""
    return AlpmDatabase.open(config.root_dir, config.db_path, config.pacman_conf)
