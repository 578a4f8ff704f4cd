"""
Package database abstraction.

The kernel manager never talks to libalpm directly. Everything goes through the
PackageDatabase protocol so the catalog and transaction logic can run against
the real pyalpm-backed adapter or an in-memory double.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class PackageRecord:
    """A package as seen in one database.

    The handle is the backend object the record was read from. It is borrowed:
    it stays valid only while the database that produced it is open.
    """

    name: str
    version: str
    db_name: str
    base: str = ""
    handle: Any = field(default=None, compare=False, repr=False)


class Transaction(Protocol):
    """A single package transaction: stage, prepare, commit, release."""

    def add_package(self, record: PackageRecord) -> None: ...

    def remove_package(self, record: PackageRecord) -> None: ...

    def prepare(self) -> None: ...

    def commit(self) -> None: ...

    def release(self) -> None: ...


class PackageDatabase(Protocol):
    """Query and transaction primitives of an opened package database."""

    def repositories(self) -> list[str]: ...

    def find_local(self, name: str) -> PackageRecord | None: ...

    def find_sync(self, name: str, repository: str | None = None) -> PackageRecord | None: ...

    def sync_packages(self) -> Iterator[PackageRecord]: ...

    def local_packages(self) -> Iterator[PackageRecord]: ...

    def vercmp(self, a: str, b: str) -> int: ...

    def begin_transaction(self) -> Transaction: ...

    def close(self) -> None: ...
