"""
Install/removal worklists and their commit as one package transaction.

The coordinator is created once per session and handed to every caller that
queues or commits operations. A lock serializes list changes with commit, so
an add that arrives while a commit is running waits and is applied to the
lists afterwards, landing in the next commit.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from archinstall import debug, error, info, warn

from .database.base import PackageDatabase, PackageRecord
from .errors import TransactionError
from .kernel.catalog import DEFAULT_MODULE_SUFFIXES, CatalogSnapshot

if TYPE_CHECKING:
    from .worker import CancellationToken


@dataclass
class TransactionResult:
    """Outcome of a worklist commit."""

    success: bool = False
    installed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    error: str | None = None
    stage: str | None = None
    cancelled: bool = False

    def get_summary(self) -> str:
        if self.cancelled:
            return "Transaction cancelled before prepare, nothing changed"
        if not self.success:
            return f"Transaction failed at {self.stage or 'unknown'} stage: {self.error or 'Unknown error'}"
        if not self.installed and not self.removed:
            return "Nothing to do"
        parts = []
        if self.installed:
            parts.append(f"installed {', '.join(self.installed)}")
        if self.removed:
            parts.append(f"removed {', '.join(self.removed)}")
        return "Transaction succeeded: " + "; ".join(parts)


class TransactionCoordinator:
    """Owns the pending install and removal lists for one session."""

    def __init__(self, db: PackageDatabase, module_suffixes: Sequence[str] = DEFAULT_MODULE_SUFFIXES) -> None:
        self.db = db
        self.module_suffixes = module_suffixes
        self._install: list[str] = []
        self._remove: list[str] = []
        self._lock = threading.RLock()

    @property
    def install_list(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._install)

    @property
    def removal_list(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._remove)

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._install or self._remove)

    def add_to_install_list(self, name: str) -> None:
        with self._lock:
            if name in self._remove:
                self._remove.remove(name)
            if name not in self._install:
                self._install.append(name)
        debug(f"Queued {name} for installation")

    def add_to_removal_list(self, name: str) -> None:
        with self._lock:
            if name in self._install:
                self._install.remove(name)
            if name not in self._remove:
                self._remove.append(name)
        debug(f"Queued {name} for removal")

    def discard(self, name: str) -> None:
        """Drop a name from both lists."""
        with self._lock:
            if name in self._install:
                self._install.remove(name)
            if name in self._remove:
                self._remove.remove(name)

    def _records(self, names: list[str], find: Callable[[str], PackageRecord | None]) -> list[PackageRecord]:
        records = []
        for name in names:
            record = find(name)
            if record is None:
                raise TransactionError("stage", f"{name} disappeared from the package database")
            records.append(record)
        return records

    def _removal_records(self, snapshot: CatalogSnapshot, name: str) -> list[PackageRecord]:
        kernel = snapshot.find(name)
        if kernel is None or not kernel.is_installed():
            raise TransactionError("stage", f"{name} is not installed")
        return self._records(kernel.packages_for_removal(self.db), self.db.find_local)

    def _install_records(self, snapshot: CatalogSnapshot, name: str) -> list[PackageRecord]:
        kernel = snapshot.find(name)
        if kernel is None or not kernel.is_available():
            raise TransactionError("stage", f"{name} was not found in any repository")
        return self._records(kernel.packages_for_install(), self.db.find_sync)

    def commit(self, cancel: CancellationToken | None = None) -> TransactionResult:
        """Apply both worklists as a single package transaction.

        The lists are cleared only after the database confirms the commit. On
        any failure they are left exactly as they were. Cancellation is honoured
        up to the prepare step; after that the commit runs to completion.

        Returns:
            TransactionResult describing what was staged and how it ended
        """
        with self._lock:
            result = TransactionResult()
            if not self._install and not self._remove:
                result.success = True
                return result

            info(f"Committing transaction: install={self._install} remove={self._remove}")
            try:
                transaction = self.db.begin_transaction()
            except TransactionError as e:
                error(str(e))
                result.error, result.stage = e.message, e.stage
                return result

            try:
                snapshot = CatalogSnapshot(self.db, self.module_suffixes)
                for name in self._remove:
                    for record in self._removal_records(snapshot, name):
                        transaction.remove_package(record)
                        result.removed.append(record.name)
                for name in self._install:
                    for record in self._install_records(snapshot, name):
                        transaction.add_package(record)
                        result.installed.append(record.name)

                if cancel is not None and cancel.cancelled:
                    warn("Transaction cancelled before prepare")
                    result.cancelled = True
                    return result

                transaction.prepare()
                transaction.commit()
            except TransactionError as e:
                error(str(e))
                result.error, result.stage = e.message, e.stage
                return result
            finally:
                try:
                    transaction.release()
                except TransactionError as e:
                    warn(str(e))

            self._install.clear()
            self._remove.clear()
            result.success = True
            info(result.get_summary())
            return result
